"""Lifecycle event emission.

Listeners subscribe per resource (or to every resource with ``"*"``) and
are called synchronously from ``emit``. Emission is fire-and-forget: a
failing listener is logged and the remaining listeners still run.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from recordstore.metadata.loader import ResourceDefinition

logger = logging.getLogger(__name__)

ANY_RESOURCE = "*"

# Listener signature: (resource_name, event_name, payload) -> None
Listener = Callable[[str, str, Any], None]


class Emitter:
    """Routes lifecycle events to registered listeners."""

    def __init__(self) -> None:
        self._listeners: dict[tuple[str, str], list[Listener]] = defaultdict(list)

    def on(self, resource_name: str, event_name: str, listener: Listener) -> None:
        """Subscribe ``listener`` to ``event_name`` on one resource or ``"*"``."""
        self._listeners[(resource_name, event_name)].append(listener)

    def off(self, resource_name: str, event_name: str, listener: Listener) -> None:
        listeners = self._listeners.get((resource_name, event_name), [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, definition: "ResourceDefinition", event_name: str, payload: Any) -> None:
        listeners = (
            self._listeners.get((definition.name, event_name), [])
            + self._listeners.get((ANY_RESOURCE, event_name), [])
        )
        for listener in listeners:
            try:
                listener(definition.name, event_name, payload)
            except Exception as e:
                logger.error(
                    "Listener for '%s' on '%s' failed: %s",
                    event_name,
                    definition.name,
                    e,
                )
