from __future__ import annotations

import re
from dataclasses import dataclass
from typing import AbstractSet, Any, List, Mapping, Optional

from recnorm.core.schema.descriptors import FieldDescriptor

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def fold_name(identifier: str) -> str:
    """Fold a camel-case identifier into its snake-case form.

    "TestId" -> "test_id", "ChildValue1" -> "child_value1",
    "HTTPServer" -> "http_server". Already snake-case names are unchanged.
    """

    s = _ACRONYM_BOUNDARY.sub(r"\1_\2", identifier)
    s = _WORD_BOUNDARY.sub(r"\1_\2", s)
    return s.lower()


@dataclass(frozen=True)
class ResolvedName:
    """Keys resolved for one field against one input object.

    - read_key: input key the value is read from, or None if absent.
    - write_key: the declared name, or the bare identifier.
    - output_key: key used in the output object.
    """

    read_key: Optional[str]
    write_key: str
    output_key: str

    @property
    def present(self) -> bool:
        return self.read_key is not None


def candidate_keys(field: FieldDescriptor) -> List[str]:
    """Read candidates in priority order: primary, secondary, folded name."""
    out: List[str] = []
    for key in (field.primary_name, field.secondary_name, fold_name(field.identifier)):
        if key and key not in out:
            out.append(key)
    return out


def resolve_names(
    field: FieldDescriptor,
    input_object: Mapping[str, Any],
    taken: AbstractSet[str] = frozenset(),
) -> ResolvedName:
    """Resolve the read and write keys of a field.

    The write key never falls back to the folded name. An undeclared field
    that matched through its folded name is emitted under the matched key,
    unless that key is in ``taken`` (write keys of sibling fields and keys
    already emitted); then it is emitted under its write key.
    """

    read_key: Optional[str] = None
    for key in candidate_keys(field):
        if key in input_object:
            read_key = key
            break

    declared = field.declared_name
    write_key = declared or field.identifier
    if declared or read_key is None or read_key in taken:
        output_key = write_key
    else:
        output_key = read_key
    return ResolvedName(read_key=read_key, write_key=write_key, output_key=output_key)
