"""In-memory identity index and the DataStore facade."""

from recordstore.store.datastore import DataStore
from recordstore.store.index import ChangeRecord, RecordMeta, ResourceIndex

__all__ = ["ChangeRecord", "DataStore", "RecordMeta", "ResourceIndex"]
