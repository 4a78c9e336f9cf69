"""The DataStore: resource registry, identity index and async CRUD entry points."""

import logging
from collections.abc import Awaitable, Mapping
from typing import Any

from recordstore.errors import IllegalArgumentError, NonexistentResourceError
from recordstore.events import Emitter
from recordstore.hooks.types import Options
from recordstore.metadata.loader import ResourceDefinition
from recordstore.persistence.adapter import Adapter
from recordstore.store.index import ChangeRecord, Observer, ResourceIndex
from recordstore.utils import compute_changes, is_blank, now_ms, update_timestamp

logger = logging.getLogger(__name__)


def _prefix(method: str, resource_name: str, signature: str) -> str:
    return f"DS.{method}({resource_name}, {signature}): "


class DataStore:
    """In-memory object store fronting one or more persistence adapters.

    Constructed once per application (or test) and passed to whatever needs
    it; there is no module-level store.

    Example:
        store = DataStore()
        store.register_adapter("memory", MemoryAdapter())
        store.define_resource(ResourceDefinition(name="document", default_adapter="memory"))

        document = await store.create("document", {"author": "John Anderson"})
        assert store.get("document", document["id"]) is document
    """

    def __init__(self, emitter: Emitter | None = None):
        self.emitter = emitter or Emitter()
        self.definitions: dict[str, ResourceDefinition] = {}
        self.adapters: dict[str, Adapter] = {}
        self._indexes: dict[str, ResourceIndex] = {}

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def define_resource(self, definition: ResourceDefinition) -> ResourceDefinition:
        """Register a resource definition and give it an empty index."""
        if definition.name in self.definitions:
            raise IllegalArgumentError(f"{definition.name} is already registered!")
        self.definitions[definition.name] = definition
        self._indexes[definition.name] = ResourceIndex(definition.name)
        logger.debug("Defined resource '%s'", definition.name)
        return definition

    def register_adapter(self, name: str, adapter: Adapter) -> None:
        self.adapters[name] = adapter

    def definition_for(self, resource_name: str, prefix: str = "") -> ResourceDefinition:
        definition = self.definitions.get(resource_name)
        if definition is None:
            raise NonexistentResourceError(f"{prefix}{resource_name}")
        return definition

    def index_for(self, resource_name: str) -> ResourceIndex:
        self.definition_for(resource_name)
        return self._indexes[resource_name]

    def adapter_for(self, definition: ResourceDefinition, options: Options) -> Adapter:
        name = options.adapter or definition.default_adapter
        adapter = self.adapters.get(name)
        if adapter is None:
            raise IllegalArgumentError(
                f"Adapter '{name}' for {definition.name} is not registered!"
            )
        return adapter

    # ------------------------------------------------------------------
    # Async operations
    # ------------------------------------------------------------------

    def create(
        self,
        resource_name: str,
        attrs: dict[str, Any],
        options: Options | Mapping[str, Any] | None = None,
    ) -> Awaitable[dict[str, Any]]:
        """Create a record through the adapter and cache the result.

        Preconditions are checked before anything is scheduled, so an
        unknown resource or non-dict attrs raise here rather than from the
        awaitable. When ``upsert`` is on and attrs carry a primary key the
        returned awaitable is an update instead.

        Raises:
            NonexistentResourceError: No resource named ``resource_name``
            IllegalArgumentError: ``attrs`` is not a dict, or bad options
        """
        from recordstore.pipeline.create import CreatePipeline
        from recordstore.pipeline.upsert import route_create

        prefix = _prefix("create", resource_name, "attrs[, options]")
        definition = self.definition_for(resource_name, prefix)
        if not isinstance(attrs, dict):
            raise IllegalArgumentError(f"{prefix}attrs: Must be an object!")
        resolved = Options.from_value(options).resolve(definition)

        if route_create(definition, attrs, resolved):
            logger.debug(
                "Routing create of %s %r to update", resource_name,
                attrs[definition.id_attribute],
            )
            return self.update(
                resource_name, attrs[definition.id_attribute], attrs, resolved
            )
        return CreatePipeline(self, definition, resolved).run(attrs)

    def update(
        self,
        resource_name: str,
        id: Any,
        attrs: dict[str, Any],
        options: Options | Mapping[str, Any] | None = None,
    ) -> Awaitable[dict[str, Any]]:
        """Update a record through the adapter and merge the result.

        Raises:
            NonexistentResourceError: No resource named ``resource_name``
            IllegalArgumentError: Blank id, non-dict attrs, or bad options
        """
        from recordstore.pipeline.update import UpdatePipeline

        prefix = _prefix("update", resource_name, "id, attrs[, options]")
        definition = self.definition_for(resource_name, prefix)
        if is_blank(id) or not isinstance(id, (str, int)):
            raise IllegalArgumentError(f"{prefix}id: Must be a string or a number!")
        if not isinstance(attrs, dict):
            raise IllegalArgumentError(f"{prefix}attrs: Must be an object!")
        resolved = Options.from_value(options).resolve(definition)
        return UpdatePipeline(self, definition, resolved).run(id, attrs)

    # ------------------------------------------------------------------
    # Synchronous index operations
    # ------------------------------------------------------------------

    def inject(
        self,
        resource_name: str,
        attrs: Mapping[str, Any],
        notify: bool | None = None,
        use_class: bool = True,
    ) -> dict[str, Any]:
        """Put ``attrs`` into the index, merging into any live record.

        Returns the live record. Merging a change appends to the record's
        change history, sets its modified flag and notifies its observers.
        """
        prefix = _prefix("inject", resource_name, "attrs[, options]")
        definition = self.definition_for(resource_name, prefix)
        if not isinstance(attrs, Mapping):
            raise IllegalArgumentError(f"{prefix}attrs: Must be an object!")
        id = attrs.get(definition.id_attribute)
        if is_blank(id):
            raise IllegalArgumentError(
                f"{prefix}attrs: Must contain the property specified by "
                f"`id_attribute` ({definition.id_attribute})!"
            )
        notify = definition.notify if notify is None else notify
        resource = self._indexes[resource_name]

        if notify:
            self.emitter.emit(definition, "beforeInject", dict(attrs))

        record = resource.get(id)
        if record is None:
            record = definition.record_class() if use_class else {}
            record.update(attrs)
            resource.add(id, record)
            resource.meta_for(id).snapshot(record)
        else:
            before = dict(record)
            record.update(attrs)
            changes = compute_changes(record, before)
            if changes:
                resource.meta_for(id).record_change(record, changes)

        if notify:
            self.emitter.emit(definition, "afterInject", record)
        return record

    def eject(
        self, resource_name: str, id: Any, notify: bool | None = None
    ) -> dict[str, Any] | None:
        """Remove a record and all of its metadata. Returns it, or None."""
        definition = self.definition_for(
            resource_name, _prefix("eject", resource_name, "id[, options]")
        )
        notify = definition.notify if notify is None else notify
        record = self._indexes[resource_name].remove(id)
        if record is not None and notify:
            self.emitter.emit(definition, "afterEject", record)
        return record

    def commit(
        self, resource_name: str, attrs: dict[str, Any], options: Options
    ) -> dict[str, Any]:
        """Inject adapter-confirmed attrs and stamp them as saved."""
        definition = self.definition_for(resource_name)
        record = self.inject(
            resource_name, attrs, notify=options.notify, use_class=options.use_class
        )
        id = record[definition.id_attribute]
        resource = self._indexes[resource_name]
        resource.completed_queries[id] = now_ms()
        meta = resource.meta_for(id)
        meta.snapshot(record)
        meta.saved = update_timestamp(meta.saved)
        meta.modified = False
        return self.get(resource_name, id)

    def create_instance(
        self,
        resource_name: str,
        attrs: Mapping[str, Any],
        options: Options | Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build a detached record that the store does not track."""
        definition = self.definition_for(
            resource_name, _prefix("createInstance", resource_name, "attrs[, options]")
        )
        if not isinstance(attrs, Mapping):
            raise IllegalArgumentError("attrs: Must be an object!")
        if Options.from_value(options).use_class:
            return definition.record_class(attrs)
        return dict(attrs)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get(self, resource_name: str, id: Any) -> dict[str, Any] | None:
        return self.index_for(resource_name).get(id)

    def get_all(self, resource_name: str) -> list[dict[str, Any]]:
        return list(self.index_for(resource_name).collection)

    def previous(self, resource_name: str, id: Any) -> dict[str, Any] | None:
        """The snapshot taken at the record's last commit."""
        meta = self.index_for(resource_name).meta.get(id)
        return meta.previous_attributes if meta else None

    def changes(self, resource_name: str, id: Any) -> dict[str, Any]:
        """Fields of the live record that differ from its last snapshot."""
        resource = self.index_for(resource_name)
        record = resource.get(id)
        if record is None:
            return {}
        return compute_changes(record, resource.meta_for(id).previous_attributes) or {}

    def has_changes(self, resource_name: str, id: Any) -> bool:
        return bool(self.changes(resource_name, id))

    def change_history(self, resource_name: str, id: Any) -> list[ChangeRecord]:
        meta = self.index_for(resource_name).meta.get(id)
        return list(meta.change_history) if meta else []

    def is_modified(self, resource_name: str, id: Any) -> bool:
        meta = self.index_for(resource_name).meta.get(id)
        return bool(meta and meta.modified)

    def last_saved(self, resource_name: str, id: Any) -> int | None:
        meta = self.index_for(resource_name).meta.get(id)
        return meta.saved if meta else None

    def completed_query(self, resource_name: str, id: Any) -> int | None:
        return self.index_for(resource_name).completed_queries.get(id)

    def watch(self, resource_name: str, id: Any, observer: Observer) -> None:
        """Call ``observer(record, changes)`` whenever the record changes."""
        resource = self.index_for(resource_name)
        if id not in resource:
            raise IllegalArgumentError(f"{resource_name} {id!r} is not in the store!")
        resource.meta_for(id).observers.append(observer)

    def unwatch(self, resource_name: str, id: Any, observer: Observer) -> None:
        meta = self.index_for(resource_name).meta.get(id)
        if meta and observer in meta.observers:
            meta.observers.remove(observer)
