"""Record reflection for dataclasses and pydantic models.

A record's schema is derived from its static annotations once per
(record type, config) pair; current values are read fresh on every call.

Declared names come from field metadata:

- dataclasses: ``field(metadata={"wire": "...", "json": "..."})``
- pydantic:    ``Field(json_schema_extra={"wire": "..."})`` for the primary
  name; ``Field(alias="...")`` or ``json_schema_extra={"json": "..."}`` for
  the secondary name.

The metadata keys follow ``NormalizerConfig.primary_tag`` and
``NormalizerConfig.secondary_tag``.
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Any, List, Mapping, Optional, Tuple, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel

from recnorm.core.config import DEFAULT_CONFIG, NormalizerConfig
from recnorm.core.errors import SchemaError, UnsupportedFieldKindError, UnsupportedRecordError

from .descriptors import FieldDescriptor, FieldKind

_SCALAR_TYPES = (int, float, str, bool)


@dataclass(frozen=True)
class FieldSpec:
    """Static part of a field descriptor (everything but the current value)."""

    identifier: str
    kind: FieldKind
    primary_name: Optional[str] = None
    secondary_name: Optional[str] = None
    numeric_type: Optional[type] = None

    def bind(self, current_value: Any) -> FieldDescriptor:
        return FieldDescriptor(
            identifier=self.identifier,
            kind=self.kind,
            current_value=current_value,
            primary_name=self.primary_name,
            secondary_name=self.secondary_name,
            numeric_type=self.numeric_type,
        )


def is_record_type(tp: Any) -> bool:
    """Return True for dataclass types and pydantic model types."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def is_record_value(value: Any) -> bool:
    """Return True for dataclass instances and pydantic model instances."""
    if isinstance(value, type):
        return False
    return isinstance(value, BaseModel) or dataclasses.is_dataclass(value)


def _strip_optional(annotation: Any) -> Any:
    """Unwrap Annotated[...] and Optional[...]; return None for other unions."""

    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
            continue
        if origin is Union or origin is types.UnionType:
            args = get_args(annotation)
            rest = [a for a in args if a is not type(None)]
            if len(rest) == 1 and len(args) == 2:
                annotation = rest[0]
                continue
            return None
        return annotation


def classify_annotation(annotation: Any) -> Optional[Tuple[FieldKind, Optional[type]]]:
    """Map a field annotation to (kind, numeric_type).

    Returns None when the annotation has no supported kind.
    """

    tp = _strip_optional(annotation)
    if tp is None:
        return None
    if tp is bool or tp is str:
        return FieldKind.SCALAR_OTHER, None
    if tp is int or tp is float:
        return FieldKind.SCALAR_NUMERIC, tp
    if is_record_type(tp):
        return FieldKind.NESTED_RECORD, None

    if get_origin(tp) is list:
        args = get_args(tp)
        if len(args) != 1:
            return None
        elem = _strip_optional(args[0])
        if elem in _SCALAR_TYPES:
            return FieldKind.LIST_OF_SCALAR, None
        if is_record_type(elem):
            return FieldKind.LIST_OF_RECORD, None
    return None


def _declared(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip() != "":
        return value.strip()
    return None


def _classify_or_raise(record_type: type, identifier: str, annotation: Any) -> Tuple[FieldKind, Optional[type]]:
    res = classify_annotation(annotation)
    if res is None:
        raise UnsupportedFieldKindError(record_type.__qualname__, identifier, annotation)
    return res


def _dataclass_specs(record_type: type, config: NormalizerConfig) -> Tuple[FieldSpec, ...]:
    try:
        hints = get_type_hints(record_type, include_extras=True)
    except NameError as e:
        raise SchemaError(f"{record_type.__qualname__}: unresolved annotation: {e}") from e
    specs: List[FieldSpec] = []
    for f in dataclasses.fields(record_type):
        kind, numeric_type = _classify_or_raise(record_type, f.name, hints.get(f.name, f.type))
        md: Mapping[str, Any] = f.metadata or {}
        specs.append(
            FieldSpec(
                identifier=f.name,
                kind=kind,
                primary_name=_declared(md.get(config.primary_tag)),
                secondary_name=_declared(md.get(config.secondary_tag)),
                numeric_type=numeric_type,
            )
        )
    return tuple(specs)


def _pydantic_specs(record_type: type, config: NormalizerConfig) -> Tuple[FieldSpec, ...]:
    specs: List[FieldSpec] = []
    for name, info in record_type.model_fields.items():
        kind, numeric_type = _classify_or_raise(record_type, name, info.annotation)
        extra = info.json_schema_extra if isinstance(info.json_schema_extra, Mapping) else {}
        specs.append(
            FieldSpec(
                identifier=name,
                kind=kind,
                primary_name=_declared(extra.get(config.primary_tag)),
                secondary_name=_declared(extra.get(config.secondary_tag)) or _declared(info.alias),
                numeric_type=numeric_type,
            )
        )
    return tuple(specs)


@lru_cache(maxsize=512)
def record_schema(record_type: type, config: NormalizerConfig = DEFAULT_CONFIG) -> Tuple[FieldSpec, ...]:
    """Return the static field specs of a record type, in declaration order.

    Raises UnsupportedRecordError for non-record types and
    UnsupportedFieldKindError for fields without a supported kind.
    """

    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        return _pydantic_specs(record_type, config)
    if isinstance(record_type, type) and dataclasses.is_dataclass(record_type):
        return _dataclass_specs(record_type, config)
    raise UnsupportedRecordError(f"not a record type: {record_type!r}")


def describe_record(record: Any, config: NormalizerConfig = DEFAULT_CONFIG) -> List[FieldDescriptor]:
    """Describe a record value as an ordered list of FieldDescriptors."""

    if not is_record_value(record):
        raise UnsupportedRecordError(f"not a record value: {type(record).__qualname__}")
    return [spec.bind(getattr(record, spec.identifier, None)) for spec in record_schema(type(record), config)]
