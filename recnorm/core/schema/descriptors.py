from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class FieldKind(str, Enum):
    """
    Closed set of field kinds the normalizer knows how to merge.

    Using str Enum keeps descriptors JSON-friendly.
    """

    SCALAR_NUMERIC = "scalar-numeric"
    SCALAR_OTHER = "scalar-other"
    NESTED_RECORD = "nested-record"
    LIST_OF_SCALAR = "list-of-scalar"
    LIST_OF_RECORD = "list-of-record"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Immutable description of one record field.

    Invariants
    - kind is derived from the static annotation only
    - current_value is the live attribute value and is never mutated
    - numeric_type is set only for SCALAR_NUMERIC fields
    """

    identifier: str
    kind: FieldKind
    current_value: Any = None
    primary_name: Optional[str] = None
    secondary_name: Optional[str] = None
    numeric_type: Optional[type] = None

    @property
    def declared_name(self) -> Optional[str]:
        """First non-empty declared name, primary convention first."""
        if self.primary_name:
            return self.primary_name
        if self.secondary_name:
            return self.secondary_name
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "kind": self.kind.value,
            "primary_name": self.primary_name,
            "secondary_name": self.secondary_name,
            "numeric_type": self.numeric_type.__name__ if self.numeric_type else None,
        }
