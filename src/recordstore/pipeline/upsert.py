"""Decide whether a create call is really an update."""

from typing import Any

from recordstore.hooks.types import Options
from recordstore.metadata.loader import ResourceDefinition
from recordstore.utils import is_blank


def route_create(
    definition: ResourceDefinition, attrs: dict[str, Any], options: Options
) -> bool:
    """True when the call should go to update instead of create.

    That is the case when upsert is enabled and ``attrs`` already carry a
    value for the resource's primary key. Decided before any hook runs.
    """
    return bool(options.upsert) and not is_blank(attrs.get(definition.id_attribute))
