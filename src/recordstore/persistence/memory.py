"""In-memory persistence adapter for development and testing.

Data is lost when the process exits.
"""

import copy
from typing import Any

from recordstore.metadata.loader import ResourceDefinition
from recordstore.utils import is_blank


class MemoryAdapter:
    """Dict-backed adapter that assigns sequence ids like ``DOC-00001``."""

    def __init__(self) -> None:
        self._data: dict[str, dict[Any, dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}

    def _next_id(self, definition: ResourceDefinition) -> str:
        value = self._sequences.get(definition.name, 0) + 1
        self._sequences[definition.name] = value
        return f"{definition.abbreviation}-{value:05d}"

    async def create(
        self, definition: ResourceDefinition, attrs: dict[str, Any], options: Any = None
    ) -> dict[str, Any]:
        """Store a copy of ``attrs``, generating the primary key if absent."""
        data = copy.deepcopy(attrs)
        pk = definition.id_attribute
        if is_blank(data.get(pk)):
            data[pk] = self._next_id(definition)
        table = self._data.setdefault(definition.name, {})
        if data[pk] in table:
            raise ValueError(f"{definition.name} {data[pk]!r} already exists")
        table[data[pk]] = data
        return copy.deepcopy(data)

    async def update(
        self,
        definition: ResourceDefinition,
        id: Any,
        attrs: dict[str, Any],
        options: Any = None,
    ) -> dict[str, Any]:
        """Merge ``attrs`` into the stored record. The primary key is kept."""
        table = self._data.get(definition.name, {})
        if id not in table:
            raise KeyError(f"{definition.name} {id!r} not found")
        changes = {k: v for k, v in attrs.items() if k != definition.id_attribute}
        table[id].update(copy.deepcopy(changes))
        return copy.deepcopy(table[id])

    def get(self, definition: ResourceDefinition, id: Any) -> dict[str, Any] | None:
        record = self._data.get(definition.name, {}).get(id)
        return copy.deepcopy(record) if record is not None else None

    def count(self, definition: ResourceDefinition) -> int:
        return len(self._data.get(definition.name, {}))
