from __future__ import annotations

from typing import Any


class NormalizationError(Exception):
    """
    Base exception for all normalization failures.
    """

    pass


class MalformedDocumentError(NormalizationError):
    """
    Raised when the input payload is not a valid JSON document.

    No partial output is produced.
    """

    pass


class NumericCoercionError(NormalizationError):
    """
    Raised when a numeric field receives a string that is not a number literal.

    A malformed numeric string is a contract violation, distinct from a
    missing value, so it is never replaced by the field default.
    """

    def __init__(self, path: str, value: Any, expected: str = "int") -> None:
        self.path = path
        self.value = value
        self.expected = expected
        super().__init__(f"{path}: cannot coerce {value!r} to {expected}")


class SchemaError(NormalizationError):
    """
    Raised when a record schema itself cannot be normalized.
    """

    pass


class UnsupportedFieldKindError(SchemaError):
    """
    Raised when a field annotation does not map to any supported field kind.
    """

    def __init__(self, record_type: str, identifier: str, annotation: Any) -> None:
        self.record_type = record_type
        self.identifier = identifier
        self.annotation = annotation
        super().__init__(f"{record_type}.{identifier}: unsupported field type {annotation!r}")


class UnsupportedRecordError(SchemaError):
    """
    Raised when a value is not a record (dataclass instance or pydantic model).
    """

    pass


class DuplicateOutputKeyError(SchemaError):
    """
    Raised when two fields of one record resolve to the same output key.
    """

    def __init__(self, path: str, key: str) -> None:
        self.path = path
        self.key = key
        super().__init__(f"{path}: output key {key!r} produced by more than one field")


class NormalizationDepthError(NormalizationError):
    """
    Raised when record nesting exceeds the configured maximum depth.
    """

    def __init__(self, path: str, max_depth: int) -> None:
        self.path = path
        self.max_depth = max_depth
        super().__init__(f"{path}: nesting exceeds max_depth={max_depth}")
