"""Field readers shared by the response models.

The remote service emits proto3-style JSON: fields holding their default value
are omitted, 64-bit integers may be quoted, and enums travel by name. Readers
therefore fall back to the proto default when a key is absent but reject a
value of the wrong type with ``ValueError``/``TypeError``; the decoder turns
those into ``DecodeError``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar

T = TypeVar("T")
E = TypeVar("E", bound=Enum)


def _type_error(key: str, expected: str, value: Any) -> TypeError:
    return TypeError(f"field {key!r} must be {expected}, got {type(value).__name__}")


def read_str(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise _type_error(key, "a string", value)
    return value


def read_bool(payload: Mapping[str, Any], key: str) -> bool:
    value = payload.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise _type_error(key, "a boolean", value)
    return value


def read_float(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool):
        raise _type_error(key, "a number", value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError as exc:
            raise ValueError(f"field {key!r} is not numeric: {value!r}") from exc
    raise _type_error(key, "a number", value)


def read_int(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if value is None:
        return 0
    if isinstance(value, bool):
        raise _type_error(key, "an integer", value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"field {key!r} is not an integer: {value!r}") from exc
    raise _type_error(key, "an integer", value)


def read_enum(payload: Mapping[str, Any], key: str, enum_cls: Type[E]) -> E:
    value = payload.get(key)
    if value is None:
        return next(iter(enum_cls))
    return parse_enum(value, enum_cls, key)


def parse_enum(value: Any, enum_cls: Type[E], key: str = "") -> E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        try:
            return enum_cls[value]
        except KeyError as exc:
            raise ValueError(f"unknown {enum_cls.__name__} {value!r} in field {key!r}") from exc
    if isinstance(value, int) and not isinstance(value, bool):
        for member in enum_cls:
            if member.value == value:
                return member
        raise ValueError(f"unknown {enum_cls.__name__} number {value} in field {key!r}")
    raise _type_error(key, f"a {enum_cls.__name__} name", value)


def read_list(payload: Mapping[str, Any], key: str, item: Callable[[Any], T]) -> List[T]:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise _type_error(key, "a list", value)
    return [item(entry) for entry in value]


def read_str_list(payload: Mapping[str, Any], key: str) -> List[str]:
    def _item(entry: Any) -> str:
        if not isinstance(entry, str):
            raise _type_error(key, "a list of strings", entry)
        return entry

    return read_list(payload, key, _item)


def read_object(payload: Mapping[str, Any], key: str, decode: Callable[[Mapping[str, Any]], T]) -> Optional[T]:
    value = payload.get(key)
    if value is None:
        return None
    return decode(require_mapping(value, key))


def require_mapping(value: Any, key: str = "") -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _type_error(key or "<root>", "an object", value)
    return value


def object_item(decode: Callable[[Mapping[str, Any]], T], key: str) -> Callable[[Any], T]:
    """Adapt a ``from_dict`` for use with ``read_list``."""

    def _item(entry: Any) -> T:
        return decode(require_mapping(entry, key))

    return _item


def dump_optional(value: Any) -> Optional[Dict[str, Any]]:
    return None if value is None else value.to_dict()
