"""recordstore: an in-memory object store with a hook-driven create pipeline.

Records are created through an adapter, run through lifecycle hooks, and
cached in an identity index. Creates can be injected optimistically and
are rolled back if anything downstream fails.
"""

from recordstore.errors import (
    IllegalArgumentError,
    NonexistentResourceError,
    RecordStoreError,
)
from recordstore.events import Emitter
from recordstore.hooks import HookRegistry, HookStage, Options, ResourceHooks, hook
from recordstore.metadata.loader import DefinitionLoader, ResourceDefinition
from recordstore.persistence.memory import MemoryAdapter
from recordstore.store.datastore import DataStore

__version__ = "0.1.0"
__all__ = [
    "DataStore",
    "DefinitionLoader",
    "Emitter",
    "HookRegistry",
    "HookStage",
    "IllegalArgumentError",
    "MemoryAdapter",
    "NonexistentResourceError",
    "Options",
    "RecordStoreError",
    "ResourceDefinition",
    "ResourceHooks",
    "hook",
]
