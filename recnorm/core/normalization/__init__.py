"""Normalization helpers for recnorm.

Normalization projects untrusted, possibly partial JSON onto the shape of a
record so that strict decoders can consume it without per-field handling.

Notes:
- Malformed input is coerced or ignored, never rejected as a schema violation.
- Transforms are deterministic and bounded by NormalizerConfig.max_depth.
"""

from recnorm.core.config import NormalizerConfig
from recnorm.core.errors import (
    DuplicateOutputKeyError,
    MalformedDocumentError,
    NormalizationDepthError,
    NormalizationError,
    NumericCoercionError,
    SchemaError,
    UnsupportedFieldKindError,
    UnsupportedRecordError,
)

from .names import ResolvedName, candidate_keys, fold_name, resolve_names
from .normalizer import Normalizer, dumps, normalize, normalize_json, normalize_record, parse_payload, to_json
from .rules import KIND_RULES, FieldInput, apply_rule, coerce_numeric

__all__ = [
    "Normalizer",
    "NormalizerConfig",
    "normalize",
    "normalize_json",
    "normalize_record",
    "to_json",
    "dumps",
    "parse_payload",
    "ResolvedName",
    "resolve_names",
    "candidate_keys",
    "fold_name",
    "KIND_RULES",
    "FieldInput",
    "apply_rule",
    "coerce_numeric",
    "NormalizationError",
    "MalformedDocumentError",
    "NumericCoercionError",
    "SchemaError",
    "UnsupportedFieldKindError",
    "UnsupportedRecordError",
    "DuplicateOutputKeyError",
    "NormalizationDepthError",
]
