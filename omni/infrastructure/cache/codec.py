"""JSON codec for cached read-models.

Encodes frozen dataclass DTOs (and plain JSON values) to JSON-compatible
structures and decodes them back using the dataclass type hints. Handles
datetime (ISO 8601), Decimal (string), str Enums (value), optionals,
nested dataclasses and homogeneous tuples/lists.
"""

from __future__ import annotations

import dataclasses
import types
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Any, Union, get_args, get_origin, get_type_hints

from omni.infrastructure.exceptions import CacheSerializationError

_SCALARS = (str, int, float, bool)


def encode(value: Any) -> Any:
    """Return a JSON-compatible structure for value.

    Raises:
        CacheSerializationError: value holds a type the codec does not know.
    """
    if value is None or isinstance(value, _SCALARS) and not isinstance(value, Enum):
        return value
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: encode(getattr(value, f.name)) for f in dataclasses.fields(value)
        }
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    if isinstance(value, dict):
        return {str(k): encode(v) for k, v in value.items()}
    raise CacheSerializationError(type(value).__name__, "unsupported type")


def decode(target: Any, data: Any) -> Any:
    """Rebuild a value of type target from its encoded form.

    Raises:
        CacheSerializationError: data does not match target.
    """
    try:
        return _decode(target, data)
    except CacheSerializationError:
        raise
    except (TypeError, ValueError, KeyError, InvalidOperation) as e:
        raise CacheSerializationError(_type_name(target), str(e)) from e


@lru_cache(maxsize=64)
def _hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", repr(target))


def _decode(target: Any, data: Any) -> Any:
    if target is Any:
        return data
    origin = get_origin(target)
    if origin in (Union, types.UnionType):
        args = get_args(target)
        if data is None:
            if type(None) in args:
                return None
            raise CacheSerializationError(_type_name(target), "null for non-optional")
        candidates = [a for a in args if a is not type(None)]
        if len(candidates) != 1:
            raise CacheSerializationError(_type_name(target), "ambiguous union")
        return _decode(candidates[0], data)
    if origin in (tuple, list):
        if not isinstance(data, list):
            raise CacheSerializationError(_type_name(target), "expected a list")
        args = get_args(target)
        item_type = args[0] if args else Any
        items = [_decode(item_type, item) for item in data]
        return tuple(items) if origin is tuple else items
    if origin is dict:
        if not isinstance(data, dict):
            raise CacheSerializationError(_type_name(target), "expected an object")
        return dict(data)
    if dataclasses.is_dataclass(target):
        return _decode_dataclass(target, data)
    if target is datetime:
        if not isinstance(data, str):
            raise CacheSerializationError("datetime", "expected an ISO string")
        return datetime.fromisoformat(data)
    if target is Decimal:
        if not isinstance(data, (str, int)):
            raise CacheSerializationError("Decimal", "expected a string")
        return Decimal(data)
    if isinstance(target, type) and issubclass(target, Enum):
        return target(data)
    if target in _SCALARS:
        if target is float and isinstance(data, int) and not isinstance(data, bool):
            return float(data)
        if not isinstance(data, target) or (target is int and isinstance(data, bool)):
            raise CacheSerializationError(target.__name__, f"got {type(data).__name__}")
        return data
    raise CacheSerializationError(_type_name(target), "unsupported target type")


def _decode_dataclass(cls: type, data: Any) -> Any:
    if not isinstance(data, dict):
        raise CacheSerializationError(cls.__name__, "expected an object")
    hints = _hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        if f.name not in data:
            has_default = (
                f.default is not dataclasses.MISSING
                or f.default_factory is not dataclasses.MISSING
            )
            if has_default:
                continue
            raise CacheSerializationError(cls.__name__, f"missing field {f.name!r}")
        kwargs[f.name] = _decode(hints[f.name], data[f.name])
    return cls(**kwargs)
