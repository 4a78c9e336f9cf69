"""Per-resource identity index and record metadata.

One ResourceIndex exists per resource name. It maps identity to the live
record and keeps one RecordMeta bundle per identity, so re-keying a record
moves all of its metadata in a single step.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable

from recordstore.utils import now_ms

# Observer signature: (record, changes) -> None
Observer = Callable[[dict[str, Any], dict[str, Any]], None]


@dataclass(frozen=True)
class ChangeRecord:
    """One entry in a record's change history."""

    changes: dict[str, Any]
    timestamp: int


@dataclass
class RecordMeta:
    """Metadata kept alongside a record, keyed by the record's identity.

    Attributes:
        previous_attributes: Deep copy taken at the last successful commit
        change_history: Append-only log of field changes
        observers: Callables notified of field-level changes
        modified: Dirty bit, set by changes since the last commit
        saved: Millisecond timestamp of the last successful persistence
    """

    previous_attributes: dict[str, Any] = field(default_factory=dict)
    change_history: list[ChangeRecord] = field(default_factory=list)
    observers: list[Observer] = field(default_factory=list)
    modified: bool = False
    saved: int | None = None

    def snapshot(self, record: dict[str, Any]) -> None:
        self.previous_attributes = copy.deepcopy(dict(record))

    def record_change(self, record: dict[str, Any], changes: dict[str, Any]) -> None:
        self.change_history.append(ChangeRecord(changes=dict(changes), timestamp=now_ms()))
        self.modified = True
        for observer in list(self.observers):
            observer(record, changes)


class ResourceIndex:
    """Identity map for a single resource.

    Invariants:
        - ``index`` holds at most one record per identity
        - every record in ``index`` appears exactly once in ``collection``
        - ``meta`` and ``completed_queries`` are keyed by the same identities
    """

    def __init__(self, name: str):
        self.name = name
        self.index: dict[Any, dict[str, Any]] = {}
        self.collection: list[dict[str, Any]] = []
        self.meta: dict[Any, RecordMeta] = {}
        self.completed_queries: dict[Any, int] = {}

    def __contains__(self, id: Any) -> bool:
        return id in self.index

    def __len__(self) -> int:
        return len(self.index)

    def get(self, id: Any) -> dict[str, Any] | None:
        return self.index.get(id)

    def meta_for(self, id: Any) -> RecordMeta:
        """Return the metadata bundle for ``id``, creating it if absent."""
        if id not in self.meta:
            self.meta[id] = RecordMeta()
        return self.meta[id]

    def put(self, id: Any, record: dict[str, Any]) -> None:
        """Install ``record`` under ``id`` without touching the collection."""
        self.index[id] = record

    def add(self, id: Any, record: dict[str, Any]) -> None:
        """Install a new record under ``id`` and append it to the collection."""
        self.index[id] = record
        self.collection.append(record)

    def remove(self, id: Any) -> dict[str, Any] | None:
        """Drop ``id`` and everything keyed by it. Returns the removed record."""
        record = self.index.pop(id, None)
        if record is not None:
            self._remove_from_collection(record)
        self.meta.pop(id, None)
        self.completed_queries.pop(id, None)
        return record

    def rekey_meta(self, old_id: Any, new_id: Any) -> None:
        """Move the metadata bundle from ``old_id`` to ``new_id``."""
        bundle = self.meta.pop(old_id, None)
        if bundle is not None:
            self.meta[new_id] = bundle

    def _remove_from_collection(self, record: dict[str, Any]) -> None:
        for i, item in enumerate(self.collection):
            if item is record:
                del self.collection[i]
                return
