"""Adapter Protocol: the interface the pipelines delegate persistence to."""

from typing import Any, Protocol, runtime_checkable

from recordstore.metadata.loader import ResourceDefinition


@runtime_checkable
class Adapter(Protocol):
    """Interface all persistence adapters must implement.

    Both methods receive serialized attrs and return the raw response the
    resource's deserialize function understands. Any exception raised
    propagates as the pipeline's failure. Timeouts are the adapter's concern.
    """

    async def create(
        self, definition: ResourceDefinition, attrs: Any, options: Any
    ) -> Any: ...

    async def update(
        self, definition: ResourceDefinition, id: Any, attrs: Any, options: Any
    ) -> Any: ...
