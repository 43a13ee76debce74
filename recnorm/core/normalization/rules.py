"""Per-kind merge rules.

Each rule combines a field's input value (possibly absent) with its current
value and returns the output value. Record-bearing kinds call back into the
normalizer through ``recurse``.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from recnorm.core.errors import NumericCoercionError, UnsupportedFieldKindError
from recnorm.core.schema.descriptors import FieldDescriptor, FieldKind

from .names import ResolvedName

log = logging.getLogger("recnorm.normalization")

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

# (record, input object, path, depth) -> normalized object or None
Recurse = Callable[[Any, Mapping[str, Any], str, int], Optional[Dict[str, Any]]]

_EMPTY: Mapping[str, Any] = {}


@dataclass(frozen=True)
class FieldInput:
    """Everything a rule needs to know about one field of one record."""

    field: FieldDescriptor
    names: ResolvedName
    value: Any
    path: str
    depth: int
    record_type: Optional[type] = None

    @property
    def present(self) -> bool:
        return self.names.present


def coerce_numeric(value: Any, numeric_type: Optional[type], path: str) -> Any:
    """Turn a quoted number back into a number; leave everything else alone.

    Raises NumericCoercionError for strings that are not number literals,
    integers too long to convert, and floats that overflow to infinity.
    """

    if not isinstance(value, str):
        return value

    text = value.strip()
    expected = "float" if numeric_type is float else "int"
    pattern = _NUMBER_PATTERN if numeric_type is float else _INTEGER_PATTERN
    if not pattern.match(text):
        raise NumericCoercionError(path, value, expected=expected)
    try:
        out: Any = float(text) if numeric_type is float else int(text)
    except ValueError as e:
        raise NumericCoercionError(path, value, expected=expected) from e
    if isinstance(out, float) and not math.isfinite(out):
        raise NumericCoercionError(path, value, expected=expected)

    log.debug("numeric_coerced", extra={"path": path, "numeric_type": expected})
    return out


def _scalar_numeric(fi: FieldInput, recurse: Recurse) -> Any:
    if not fi.present:
        return fi.field.current_value
    return coerce_numeric(fi.value, fi.field.numeric_type, fi.path)


def _scalar_other(fi: FieldInput, recurse: Recurse) -> Any:
    if not fi.present:
        return fi.field.current_value
    return fi.value


def _nested_record(fi: FieldInput, recurse: Recurse) -> Any:
    current = fi.field.current_value
    if current is None:
        return None
    nested_input = fi.value if fi.present and isinstance(fi.value, Mapping) else _EMPTY
    return recurse(current, nested_input, fi.path, fi.depth + 1)


def _list_of_scalar(fi: FieldInput, recurse: Recurse) -> List[Any]:
    # Input contents are ignored even when present; see DESIGN.md.
    current = fi.field.current_value
    return list(current) if current is not None else []


def _list_of_record(fi: FieldInput, recurse: Recurse) -> List[Any]:
    current = fi.field.current_value
    if current is None:
        return []
    items = fi.value if fi.present and isinstance(fi.value, list) else []

    out: List[Any] = []
    for i, element in enumerate(current):
        elem_path = f"{fi.path}[{i}]"
        if element is None:
            out.append(None)
            continue
        elem_input = items[i] if i < len(items) and isinstance(items[i], Mapping) else _EMPTY
        out.append(recurse(element, elem_input, elem_path, fi.depth + 1))
    return out


KIND_RULES: Dict[FieldKind, Callable[[FieldInput, Recurse], Any]] = {
    FieldKind.SCALAR_NUMERIC: _scalar_numeric,
    FieldKind.SCALAR_OTHER: _scalar_other,
    FieldKind.NESTED_RECORD: _nested_record,
    FieldKind.LIST_OF_SCALAR: _list_of_scalar,
    FieldKind.LIST_OF_RECORD: _list_of_record,
}


def apply_rule(fi: FieldInput, recurse: Recurse) -> Any:
    """Apply the rule registered for the field's kind."""

    rule = KIND_RULES.get(fi.field.kind)
    if rule is None:
        owner = fi.record_type.__qualname__ if fi.record_type is not None else fi.path
        raise UnsupportedFieldKindError(owner, fi.field.identifier, fi.field.kind)
    if not fi.present:
        log.debug("field_defaulted", extra={"path": fi.path, "kind": fi.field.kind.value})
    return rule(fi, recurse)
