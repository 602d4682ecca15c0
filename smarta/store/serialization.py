"""Conversion between model dataclasses and table rows."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from types import NoneType, UnionType
from typing import Any, TypeVar, Union, get_args, get_origin, get_type_hints

T = TypeVar("T")


def to_row(obj: Any) -> dict[str, Any]:
    """Convert a dataclass to a row, leaving embedded relations out."""
    return {
        f.name: serialize_value(getattr(obj, f.name))
        for f in fields(obj)
        if not f.metadata.get("relation")
    }


def serialize_value(value: Any) -> Any:
    """Serialize a value for storage.

    Enums are stored as their values. ``Decimal``, ``date`` and
    ``datetime`` stay native; both stores handle them.
    """
    if isinstance(value, Enum):
        return value.value
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def to_json_value(value: Any) -> Any:
    """Serialize a value for a JSON request body."""
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json_value(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Decimal):
        return float(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, (datetime, date)):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: to_json_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [to_json_value(v) for v in value]
    return value


def from_row(cls: type[T], row: dict[str, Any]) -> T:
    """Build a model dataclass from a row.

    Columns the model does not declare are ignored, relation fields are
    left unset, and values are coerced to the declared field types.
    """
    kwargs = {
        name: coerce_value(tp, row[name])
        for name, tp in _column_types(cls).items()
        if name in row
    }
    return cls(**kwargs)


def coerce_value(tp: Any, value: Any) -> Any:
    """Coerce a raw column value to ``tp``."""
    if value is None:
        return None

    tp = _unwrap_optional(tp)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return value if isinstance(value, tp) else tp(value)
    if tp is Decimal:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    if tp is datetime:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        return value
    if tp is date:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            return date.fromisoformat(value[:10])
        return value
    if tp is int and not isinstance(value, int):
        return int(value)
    return value


def _unwrap_optional(tp: Any) -> Any:
    if get_origin(tp) is Union or isinstance(tp, UnionType):
        args = [a for a in get_args(tp) if a is not NoneType]
        if len(args) == 1:
            return args[0]
    return tp


@lru_cache(maxsize=None)
def _column_types(cls: type) -> dict[str, Any]:
    hints = get_type_hints(cls)
    return {
        f.name: hints[f.name]
        for f in fields(cls)
        if not f.metadata.get("relation")
    }
