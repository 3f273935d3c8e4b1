# component name reported on every span
COMPONENT = "redis-py"

# db.type value
TYPE = "redis"

# span names
CMD_PREFIX = "redis."
DEFAULT_CMD = "redis.command"
PIPELINE = "redis.pipelined"

# transaction markers wrapped around a transactional pipeline
MULTI = "MULTI"
EXEC = "EXEC"

PEER_ADDRESS_FORMAT = "redis://{host}:{port}"
