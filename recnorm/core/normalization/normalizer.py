from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from recnorm.core.config import DEFAULT_CONFIG, NormalizerConfig
from recnorm.core.errors import DuplicateOutputKeyError, MalformedDocumentError, NormalizationDepthError
from recnorm.core.schema.reflection import describe_record

from .names import resolve_names
from .rules import FieldInput, apply_rule

log = logging.getLogger("recnorm.normalization")

ROOT_PATH: str = "$"

Payload = Union[str, bytes, bytearray, Mapping[str, Any]]


def _child_path(parent: str, key: str) -> str:
    return f"{parent}.{key}"


def parse_payload(payload: Payload) -> Any:
    """Parse raw JSON text/bytes into a tree; pass already-parsed trees through.

    Raises MalformedDocumentError when the payload is not valid JSON.
    """

    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = bytes(payload).decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"payload is not valid UTF-8: {e}") from e
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except json.JSONDecodeError as e:
            raise MalformedDocumentError(f"payload is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e
        except RecursionError as e:
            raise MalformedDocumentError("payload is nested too deeply to parse") from e
    return payload


@dataclass(frozen=True)
class Normalizer:
    """Project loosely-typed JSON onto the shape of a record.

    Invariants
    - Every field of the record appears exactly once in the output
    - Record current values are read, never mutated
    - Output trees are freshly built; only scalars are shared with the input

    Thread-safe: holds no mutable state.
    """

    config: NormalizerConfig = DEFAULT_CONFIG

    def normalize_record(self, record: Any, tree: Any) -> Dict[str, Any]:
        """Normalize an already-parsed JSON tree against a record."""

        if isinstance(tree, Mapping):
            root: Mapping[str, Any] = tree
        else:
            log.debug("non_object_document", extra={"type": type(tree).__name__})
            root = {}
        return self._merge(record, root, ROOT_PATH, 1)

    def normalize(self, record: Any, payload: Payload) -> Dict[str, Any]:
        """Normalize raw JSON text/bytes (or a parsed tree) against a record."""
        return self.normalize_record(record, parse_payload(payload))

    def normalize_json(self, record: Any, payload: Payload, *, sort_keys: bool = False) -> str:
        """Normalize and serialize compactly."""
        return dumps(self.normalize(record, payload), sort_keys=sort_keys)

    def to_json(self, record: Any, *, sort_keys: bool = False) -> str:
        """Serialize the full projection of a record (its current values)."""
        return dumps(self.normalize_record(record, {}), sort_keys=sort_keys)

    def _merge(self, record: Any, input_object: Mapping[str, Any], path: str, depth: int) -> Dict[str, Any]:
        if depth > self.config.max_depth:
            raise NormalizationDepthError(path, self.config.max_depth)

        fields = describe_record(record, self.config)
        write_keys = [fd.declared_name or fd.identifier for fd in fields]
        counts = Counter(write_keys)
        for key in write_keys:
            if counts[key] > 1:
                raise DuplicateOutputKeyError(path, key)

        out: Dict[str, Any] = {}
        for fd, own_key in zip(fields, write_keys):
            taken = out.keys() | (counts.keys() - {own_key})
            names = resolve_names(fd, input_object, taken)

            fi = FieldInput(
                field=fd,
                names=names,
                value=input_object[names.read_key] if names.present else None,
                path=_child_path(path, names.read_key or names.output_key),
                depth=depth,
                record_type=type(record),
            )
            out[names.output_key] = apply_rule(fi, self._merge)
        return out


def dumps(tree: Any, *, sort_keys: bool = False, indent: Optional[int] = None) -> str:
    """Serialize an output tree; compact unless indent is given.

    Non-finite floats raise ValueError rather than emitting Infinity/NaN.
    """
    separators = (",", ":") if indent is None else (",", ": ")
    return json.dumps(
        tree, sort_keys=sort_keys, indent=indent, separators=separators, ensure_ascii=False, allow_nan=False
    )


def _normalizer(config: Optional[NormalizerConfig]) -> Normalizer:
    return Normalizer(config=config or DEFAULT_CONFIG)


def normalize_record(record: Any, tree: Any, *, config: Optional[NormalizerConfig] = None) -> Dict[str, Any]:
    """Normalize a parsed JSON tree against a record."""
    return _normalizer(config).normalize_record(record, tree)


def normalize(record: Any, payload: Payload, *, config: Optional[NormalizerConfig] = None) -> Dict[str, Any]:
    """Normalize a JSON payload against a record and return the output tree.

    payload may be str, bytes, bytearray or an already-parsed tree.

    Raises:
    - MalformedDocumentError: payload is not valid JSON
    - NumericCoercionError: a numeric field holds a non-numeric string
    - SchemaError: the record schema cannot be normalized
    """

    return _normalizer(config).normalize(record, payload)


def normalize_json(
    record: Any,
    payload: Payload,
    *,
    config: Optional[NormalizerConfig] = None,
    sort_keys: bool = False,
) -> str:
    """Normalize a JSON payload against a record and return compact JSON text."""
    return _normalizer(config).normalize_json(record, payload, sort_keys=sort_keys)


def to_json(record: Any, *, config: Optional[NormalizerConfig] = None, sort_keys: bool = False) -> str:
    """Serialize a record's full projection using its declared names."""
    return _normalizer(config).to_json(record, sort_keys=sort_keys)
