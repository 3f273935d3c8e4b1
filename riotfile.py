# type: ignore
from typing import List  # noqa
from typing import Tuple  # noqa

from riot import Venv


latest = ""


SUPPORTED_PYTHON_VERSIONS: List[Tuple[int, int]] = [
    (3, 8),
    (3, 9),
    (3, 10),
    (3, 11),
    (3, 12),
    (3, 13),
]  # type: List[Tuple[int, int]]


def version_to_str(version: Tuple[int, int]) -> str:
    """Convert a Python version tuple to a string

    >>> version_to_str((3, 8))
    '3.8'
    >>> version_to_str((3, ))
    '3'
    """
    return ".".join(str(p) for p in version)


def str_to_version(version: str) -> Tuple[int, int]:
    """Convert a Python version string to a tuple

    >>> str_to_version("3.8")
    (3, 8)
    >>> str_to_version("3")
    (3,)
    """
    return tuple(int(p) for p in version.split("."))


MIN_PYTHON_VERSION = version_to_str(min(SUPPORTED_PYTHON_VERSIONS))
MAX_PYTHON_VERSION = version_to_str(max(SUPPORTED_PYTHON_VERSIONS))


def select_pys(min_version: str = MIN_PYTHON_VERSION, max_version: str = MAX_PYTHON_VERSION) -> List[str]:
    """Helper to select python versions from the list of versions we support

    >>> select_pys(min_version='3.8', max_version='3.9')
    ['3.8', '3.9']
    """
    min_version = str_to_version(min_version)
    max_version = str_to_version(max_version)

    return [version_to_str(version) for version in SUPPORTED_PYTHON_VERSIONS if min_version <= version <= max_version]


venv = Venv(
    pkgs={
        "pytest": latest,
        "pytest-randomly": latest,
        "hypothesis": latest,
        "opentracing": latest,
    },
    venvs=[
        Venv(
            name="core",
            pys=select_pys(),
            command="pytest {cmdargs} tests/ --ignore=tests/contrib",
            pkgs={"redis": latest},
        ),
        Venv(
            name="redis",
            command="pytest {cmdargs} tests/contrib/redis",
            venvs=[
                Venv(
                    pys=select_pys(max_version="3.10"),
                    pkgs={"redis": "~=4.3"},
                ),
                Venv(
                    pys=select_pys(),
                    pkgs={"redis": "==5.0.1"},
                ),
                Venv(
                    # redis 6 dropped Python 3.8
                    pys=select_pys(min_version="3.9"),
                    pkgs={"redis": "~=8.1"},
                ),
            ],
        ),
    ],
)
