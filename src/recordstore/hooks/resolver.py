"""Resolve the effective hook for a lifecycle stage and run it.

Resolution order per stage: call-scoped override on Options, then the
resource definition's hook, then pass-through. Stages resolve independently.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from recordstore.hooks.types import DeserializeFn, HookFn, HookStage, Options, SerializeFn
from recordstore.metadata.loader import ResourceDefinition

logger = logging.getLogger(__name__)

# Normalized hook: async (resource_name, attrs) -> attrs
Step = Callable[[str, dict[str, Any]], Awaitable[dict[str, Any]]]


def _passthrough(resource_name: str, attrs: dict[str, Any]) -> dict[str, Any]:
    return attrs


def resolve_hook(
    stage: HookStage, options: Options, definition: ResourceDefinition
) -> Step:
    """Pick the function for ``stage`` and normalize it into an async step.

    The step calls the hook with ``(resource_name, attrs)``. Hooks may be
    sync or async. A hook returning None hands the (possibly mutated) input
    attrs to the next stage; any other return value replaces them. Raising
    aborts the pipeline.
    """
    fn: HookFn | None = options.override_for(stage)
    source = "call"
    if fn is None:
        fn = definition.hooks.for_stage(stage)
        source = "resource"
    if fn is None:
        fn = _passthrough
        source = "passthrough"

    async def step(resource_name: str, attrs: dict[str, Any]) -> dict[str, Any]:
        logger.debug("Running %s hook (%s) for %s", stage.value, source, resource_name)
        result = fn(resource_name, attrs)
        if inspect.isawaitable(result):
            result = await result
        if result is None:
            return attrs
        return result

    return step


async def run_stage(
    stage: HookStage,
    options: Options,
    definition: ResourceDefinition,
    attrs: dict[str, Any],
) -> dict[str, Any]:
    """Resolve and run a single stage against ``attrs``."""
    step = resolve_hook(stage, options, definition)
    return await step(definition.name, attrs)


def resolve_codec(
    options: Options, definition: ResourceDefinition
) -> tuple[SerializeFn, DeserializeFn]:
    """Resolve the serialize/deserialize pair, call-scoped override first."""
    serialize = options.serialize or definition.serialize
    deserialize = options.deserialize or definition.deserialize
    return serialize, deserialize
