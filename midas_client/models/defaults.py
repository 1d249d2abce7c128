"""Zero values for envelope payload types.

An envelope rebuilt from a status-only response still needs a ``data`` value
of the promised type. Each supported payload type maps to one canonical empty
value here; domain models opt in through the ``Defaultable`` protocol.
"""

from __future__ import annotations

import types
import typing
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class Defaultable(Protocol):
    """A payload type that can produce its own empty value."""

    @classmethod
    def default(cls) -> Any: ...


_NoneType = type(None)

# Keyed by the runtime origin of the annotation (list[int] -> list).
_ZERO_VALUES: dict[type, Callable[[], Any]] = {
    int: int,
    float: float,
    bool: bool,
    str: str,
    bytes: bytes,
    list: list,
    tuple: tuple,
    dict: dict,
    _NoneType: lambda: None,
}


def register_default(tp: type, factory: Callable[[], Any]) -> None:
    """Register a zero-value factory for a payload type."""
    _ZERO_VALUES[tp] = factory


def _is_optional(tp: Any) -> bool:
    origin = typing.get_origin(tp)
    if origin is typing.Union or origin is types.UnionType:
        return _NoneType in typing.get_args(tp)
    return False


def is_defaultable(tp: Any) -> bool:
    """Return True if ``default_for(tp)`` would succeed."""
    if tp is None or _is_optional(tp):
        return True
    origin = typing.get_origin(tp) or tp
    if origin in _ZERO_VALUES:
        return True
    return isinstance(origin, type) and issubclass(origin, Defaultable)


def default_for(tp: Any) -> Any:
    """Return the zero value for a payload annotation.

    Raises
    ------
    TypeError
        If the type is neither registered nor implements ``Defaultable``.
    """
    if tp is None or _is_optional(tp):
        return None

    origin = typing.get_origin(tp) or tp
    factory = _ZERO_VALUES.get(origin)
    if factory is not None:
        return factory()

    if isinstance(origin, type) and issubclass(origin, Defaultable):
        return origin.default()

    raise TypeError(f"No default value available for payload type {tp!r}")
