"""Resource definitions and their YAML loading / validation."""

from recordstore.metadata.loader import DefinitionLoader, ResourceDefinition

__all__ = ["DefinitionLoader", "ResourceDefinition"]
