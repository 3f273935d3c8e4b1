from typing import Any  # noqa:F401
from typing import Optional  # noqa:F401

import wrapt


# FunctionWrapper is not an ObjectProxy subclass from wrapt 2 onwards
_WRAPPER_TYPES = (wrapt.ObjectProxy, wrapt.FunctionWrapper, wrapt.BoundFunctionWrapper)


class NotWrappedError(Exception):
    pass


def iswrapped(obj, attr=None):
    # type: (Any, Optional[str]) -> bool
    """Returns whether an attribute is wrapped or not."""
    if attr is not None:
        obj = getattr(obj, attr, None)
    return hasattr(obj, "__wrapped__") and isinstance(obj, _WRAPPER_TYPES)


def unwrap(obj: Any, attr: str) -> None:
    """Restore ``obj.attr`` to the function it wraps."""
    wrapper = obj.__dict__.get(attr) if hasattr(obj, "__dict__") else None
    if wrapper is None or not iswrapped(wrapper):
        raise NotWrappedError("{}.{} is not wrapped".format(obj, attr))
    setattr(obj, attr, wrapper.__wrapped__)
