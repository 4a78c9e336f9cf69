"""The create pipeline.

Stages, in order, each feeding the next:

1. beforeValidate, validate, afterValidate, beforeCreate hooks
2. ``beforeCreate`` event, then optional eager injection
3. adapter ``create`` with serialized attrs
4. deserialize, then the afterCreate hook, then the ``afterCreate`` event
5. commit into the store (reconciling any eager injection), or build a
   detached instance when ``cache_response`` is off

Any failure after step 2 rolls back the eager injection before the original
exception propagates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from recordstore.hooks.resolver import resolve_codec, run_stage
from recordstore.hooks.types import CREATE_STAGES, HookStage, Options
from recordstore.metadata.loader import ResourceDefinition
from recordstore.pipeline.eager import EagerInjection

if TYPE_CHECKING:
    from recordstore.store.datastore import DataStore

logger = logging.getLogger(__name__)

# Every create stage except afterCreate, which runs on the adapter response
PRE_BACKEND_STAGES = CREATE_STAGES[:-1]


class CreatePipeline:
    """Runs one create call against a store.

    ``options`` must already be resolved against ``definition``.
    """

    def __init__(self, store: DataStore, definition: ResourceDefinition, options: Options):
        self.store = store
        self.definition = definition
        self.options = options
        self.eager = EagerInjection(store, definition, notify=bool(options.notify))

    async def run(self, attrs: dict[str, Any]) -> dict[str, Any]:
        definition = self.definition
        options = self.options
        name = definition.name
        dispatched = False
        # Hooks and eager injection work on a copy; the caller's dict never
        # sees a temporary identity.
        attrs = dict(attrs)

        try:
            for stage in PRE_BACKEND_STAGES:
                attrs = await run_stage(stage, options, definition, attrs)

            serialize, deserialize = resolve_codec(options, definition)
            adapter = self.store.adapter_for(definition, options)

            if options.notify:
                self.store.emitter.emit(definition, "beforeCreate", dict(attrs))
            if options.eager_inject and options.cache_response:
                self.eager.inject(attrs)

            response = await adapter.create(definition, serialize(name, attrs), options)
            dispatched = True

            attrs = deserialize(name, response)
            attrs = await run_stage(HookStage.AFTER_CREATE, options, definition, attrs)
            if options.notify:
                self.store.emitter.emit(definition, "afterCreate", dict(attrs))

            if not options.cache_response:
                return self.store.create_instance(name, attrs, options)

            if self.eager.active:
                self.eager.reconcile(attrs.get(definition.id_attribute))
            record = self.store.commit(name, attrs, options)
            self.eager.complete()
        except BaseException:
            # Cancellation rolls back too
            if self.eager.active:
                if dispatched:
                    logger.warning(
                        "Rolling back %s %r after the adapter accepted it; "
                        "the backend may still hold the record",
                        name,
                        self.eager.current_id,
                    )
                self.eager.rollback()
            raise

        logger.info("Created %s %r", name, record[definition.id_attribute])
        return record
