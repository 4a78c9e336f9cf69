"""Load and resolve resource definitions from YAML files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from recordstore.hooks.registry import HookRegistry
from recordstore.hooks.types import (
    VALID_HOOK_POINTS,
    DeserializeFn,
    HookStage,
    ResourceHooks,
    SerializeFn,
)


def default_serialize(resource_name: str, attrs: dict[str, Any]) -> dict[str, Any]:
    """Hand adapters a shallow copy so they cannot mutate in-flight attrs."""
    return dict(attrs)


def default_deserialize(resource_name: str, response: Any) -> dict[str, Any]:
    return response


@dataclass
class ResourceDefinition:
    """Static configuration for one record type.

    Attributes:
        name: Resource name used in store calls (e.g. "document")
        id_attribute: Primary-key field name
        default_adapter: Adapter used when a call does not name one
        hooks: Resource-level hook functions, one slot per stage
        eager_inject: Default for Options.eager_inject
        notify: Default for Options.notify
        serialize / deserialize: Codec applied around adapter calls
        abbreviation: Prefix for sequence-generated ids (e.g. "DOC")
        record_class: Instance constructor for stored records (dict subclass)
    """

    name: str
    id_attribute: str = "id"
    default_adapter: str = "sql"
    hooks: ResourceHooks = field(default_factory=ResourceHooks)
    eager_inject: bool = False
    notify: bool = True
    serialize: SerializeFn = default_serialize
    deserialize: DeserializeFn = default_deserialize
    abbreviation: str = ""
    record_class: type[dict] = dict

    def __post_init__(self) -> None:
        # Auto-generate from name (first 3 chars, uppercase)
        if not self.abbreviation:
            self.abbreviation = self.name[:3].upper()
        else:
            self.abbreviation = self.abbreviation.upper()


class DefinitionLoader:
    """Loads resource definitions from ``<metadata_path>/resources/*.yaml``.

    Example file::

        resource: document
        idAttribute: id
        defaultAdapter: sql
        eagerInject: true
        hooks:
          validate: requireAuthor

    Hook values are names looked up in HookRegistry, so hooks must be
    registered before load_all() runs.
    """

    def __init__(self, metadata_path: Path, default_adapter: str = "sql"):
        self.metadata_path = metadata_path
        self.default_adapter = default_adapter
        self.resources: dict[str, ResourceDefinition] = {}

    def load_all(self) -> None:
        """Load all resource definitions."""
        self._load_resources()
        self._validate_abbreviations()

    def _load_resources(self) -> None:
        resources_path = self.metadata_path / "resources"
        if not resources_path.exists():
            return

        for yaml_file in sorted(resources_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "resource" in data:
                    definition = self.resolve_resource(data)
                    self.resources[definition.name] = definition

    def _validate_abbreviations(self) -> None:
        """Sequence ids are prefixed by abbreviation, so they must not collide."""
        seen: dict[str, str] = {}  # abbreviation -> resource name

        for name, definition in self.resources.items():
            abbrev = definition.abbreviation
            if not abbrev.isalnum():
                raise ValueError(
                    f"Resource '{name}' abbreviation '{abbrev}' must be alphanumeric"
                )
            if abbrev in seen:
                raise ValueError(
                    f"Duplicate abbreviation '{abbrev}' used by both "
                    f"'{seen[abbrev]}' and '{name}'"
                )
            seen[abbrev] = name

    def resolve_resource(self, data: dict) -> ResourceDefinition:
        """Convert a parsed YAML document into a ResourceDefinition."""
        return ResourceDefinition(
            name=data["resource"],
            id_attribute=data.get("idAttribute", "id"),
            default_adapter=data.get("defaultAdapter", self.default_adapter),
            hooks=self._resolve_hooks(data["resource"], data.get("hooks", {})),
            eager_inject=data.get("eagerInject", False),
            notify=data.get("notify", True),
            abbreviation=data.get("abbreviation", ""),
        )

    def _resolve_hooks(self, resource_name: str, data: dict) -> ResourceHooks:
        """Map ``{stageName: registeredHookName}`` onto ResourceHooks.

        Raises:
            ValueError: Unknown stage name, unregistered hook, or a hook
                registered for other stages only
        """
        hooks = ResourceHooks()
        for point, hook_name in data.items():
            if point not in VALID_HOOK_POINTS:
                raise ValueError(
                    f"Resource '{resource_name}' has invalid hook point '{point}'. "
                    f"Valid: {', '.join(VALID_HOOK_POINTS)}"
                )
            stage = HookStage(point)
            setattr(hooks, stage.attribute, HookRegistry.get(hook_name, stage))
        return hooks

    def get_resource(self, name: str) -> ResourceDefinition | None:
        """Get a resolved resource by name."""
        return self.resources.get(name)

    def list_resources(self) -> list[str]:
        """List all resource names."""
        return list(self.resources.keys())
