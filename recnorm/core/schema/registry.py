from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from recnorm.core.errors import UnsupportedRecordError

from .reflection import is_record_type, is_record_value

RecordFactory = Callable[[], Any]


def load_record_factory(target: str) -> RecordFactory:
    """Resolve "package.module:Attr" into a zero-argument record factory.

    Attr may be a record type (instantiated with no arguments) or a callable
    returning a record value.

    Security notes:
    - Importing a module executes code. Only resolve trusted targets.

    """

    module_name, sep, attr_path = (target or "").partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(f"record target must look like 'module:Attr', got {target!r}")

    obj: Any = importlib.import_module(module_name)
    for part in attr_path.split("."):
        obj = getattr(obj, part)

    if is_record_type(obj):
        return obj
    if callable(obj):
        return obj
    raise UnsupportedRecordError(f"{target} is neither a record type nor a factory")


@dataclass
class RecordRegistry:
    """In-memory registry of named record factories.

    A fresh record value is built per lookup, so callers never share
    current values.

    """

    _factories: Dict[str, RecordFactory] = field(default_factory=dict, init=False, repr=False)

    def register(self, name: str, factory: RecordFactory) -> None:
        """Register a record factory by name."""
        if not name:
            raise ValueError("record name must be non-empty")
        if name in self._factories:
            raise RuntimeError(f"Duplicate record name: {name}")
        self._factories[name] = factory

    def get(self, name: str) -> Any:
        """Build a record value by name."""
        return self._build(name, self._factories[name])

    def try_get(self, name: str) -> Optional[Any]:
        """Build a record value or return None."""
        factory = self._factories.get(name)
        if factory is None:
            return None
        return self._build(name, factory)

    def list_names(self) -> List[str]:
        """List record names in insertion order."""
        return list(self._factories)

    @staticmethod
    def _build(name: str, factory: RecordFactory) -> Any:
        value = factory()
        if not is_record_value(value):
            raise UnsupportedRecordError(f"factory for {name!r} did not return a record")
        return value

    @classmethod
    def from_spec(cls, raw: str) -> "RecordRegistry":
        """Parse "name=module:Attr;name2=module:Attr2" into a registry.

        Blank entries are skipped; malformed entries raise ValueError.
        """

        reg = cls()
        for entry in (raw or "").split(";"):
            entry = entry.strip()
            if not entry:
                continue
            name, sep, target = entry.partition("=")
            if not sep:
                raise ValueError(f"registry entry must look like 'name=module:Attr', got {entry!r}")
            reg.register(name.strip(), load_record_factory(target.strip()))
        return reg
