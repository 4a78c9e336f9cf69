"""The update pipeline, target of create's upsert routing.

beforeUpdate hook → ``beforeUpdate`` event → adapter ``update`` →
deserialize → afterUpdate hook → ``afterUpdate`` event → commit.
The create-only stages (validation and beforeCreate/afterCreate) never run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from recordstore.hooks.resolver import resolve_codec, run_stage
from recordstore.hooks.types import HookStage, Options
from recordstore.metadata.loader import ResourceDefinition

if TYPE_CHECKING:
    from recordstore.store.datastore import DataStore

logger = logging.getLogger(__name__)


class UpdatePipeline:
    """Runs one update call against a store."""

    def __init__(self, store: DataStore, definition: ResourceDefinition, options: Options):
        self.store = store
        self.definition = definition
        self.options = options

    async def run(self, id: Any, attrs: dict[str, Any]) -> dict[str, Any]:
        definition = self.definition
        options = self.options
        name = definition.name

        attrs = await run_stage(HookStage.BEFORE_UPDATE, options, definition, attrs)

        serialize, deserialize = resolve_codec(options, definition)
        adapter = self.store.adapter_for(definition, options)
        if options.notify:
            self.store.emitter.emit(definition, "beforeUpdate", dict(attrs))

        response = await adapter.update(definition, id, serialize(name, attrs), options)

        attrs = deserialize(name, response)
        attrs = await run_stage(HookStage.AFTER_UPDATE, options, definition, attrs)
        if options.notify:
            self.store.emitter.emit(definition, "afterUpdate", dict(attrs))

        if not options.cache_response:
            return self.store.create_instance(name, attrs, options)

        record = self.store.commit(name, attrs, options)
        logger.info("Updated %s %r", name, id)
        return record
