"""Hook system types for recordstore.

Defines the data structures shared by the create and update pipelines:
- HookStage: the lifecycle points a hook can be attached to
- ResourceHooks: the resource-level hook configuration (one slot per stage)
- Options: per-call configuration merged over resource defaults
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import TYPE_CHECKING, Any

from recordstore.errors import IllegalArgumentError

if TYPE_CHECKING:
    from recordstore.metadata.loader import ResourceDefinition

# Hook function signature: (resource_name, attrs) -> attrs | None, sync or async
HookFn = Callable[[str, dict[str, Any]], Any]

# Codec signatures
SerializeFn = Callable[[str, dict[str, Any]], Any]
DeserializeFn = Callable[[str, Any], dict[str, Any]]


class HookStage(Enum):
    """Lifecycle points, valued by their metadata (YAML) names."""

    BEFORE_VALIDATE = "beforeValidate"
    VALIDATE = "validate"
    AFTER_VALIDATE = "afterValidate"
    BEFORE_CREATE = "beforeCreate"
    AFTER_CREATE = "afterCreate"
    BEFORE_UPDATE = "beforeUpdate"
    AFTER_UPDATE = "afterUpdate"

    @property
    def attribute(self) -> str:
        """Attribute name of this stage on ResourceHooks and Options."""
        return _STAGE_ATTRIBUTES[self]


_STAGE_ATTRIBUTES = {
    HookStage.BEFORE_VALIDATE: "before_validate",
    HookStage.VALIDATE: "validate",
    HookStage.AFTER_VALIDATE: "after_validate",
    HookStage.BEFORE_CREATE: "before_create",
    HookStage.AFTER_CREATE: "after_create",
    HookStage.BEFORE_UPDATE: "before_update",
    HookStage.AFTER_UPDATE: "after_update",
}

# Stage names as written in resource metadata
VALID_HOOK_POINTS = tuple(stage.value for stage in HookStage)

# Stages run by the create pipeline, in order
CREATE_STAGES = (
    HookStage.BEFORE_VALIDATE,
    HookStage.VALIDATE,
    HookStage.AFTER_VALIDATE,
    HookStage.BEFORE_CREATE,
    HookStage.AFTER_CREATE,
)


@dataclass
class ResourceHooks:
    """Resource-level hook functions. None means pass-through."""

    before_validate: HookFn | None = None
    validate: HookFn | None = None
    after_validate: HookFn | None = None
    before_create: HookFn | None = None
    after_create: HookFn | None = None
    before_update: HookFn | None = None
    after_update: HookFn | None = None

    def for_stage(self, stage: HookStage) -> HookFn | None:
        return getattr(self, stage.attribute)


@dataclass
class Options:
    """Per-call options for create and update.

    Attributes:
        cache_response: Inject the adapter's result into the store
        upsert: Route a create carrying a primary key to update
        eager_inject: Inject before the adapter confirms (None: resource default)
        notify: Emit lifecycle events (None: resource default)
        use_class: Wrap records with the resource's record_class
        adapter: Adapter name override (None: resource default)
        serialize / deserialize: Codec overrides
        params: Free-form values forwarded to the adapter
    """

    cache_response: bool = True
    upsert: bool = True
    eager_inject: bool | None = None
    notify: bool | None = None
    use_class: bool = True
    adapter: str | None = None
    before_validate: HookFn | None = None
    validate: HookFn | None = None
    after_validate: HookFn | None = None
    before_create: HookFn | None = None
    after_create: HookFn | None = None
    before_update: HookFn | None = None
    after_update: HookFn | None = None
    serialize: SerializeFn | None = None
    deserialize: DeserializeFn | None = None
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Options | Mapping[str, Any] | None) -> Options:
        """Coerce None, a mapping of option names, or an Options into Options.

        Always returns a fresh object so resolving never mutates the caller's.
        """
        if value is None:
            return cls()
        if isinstance(value, Options):
            return replace(value, params=dict(value.params))
        if isinstance(value, Mapping):
            known = {f.name for f in fields(cls)}
            unknown = set(value) - known
            if unknown:
                raise IllegalArgumentError(
                    f"options: Unknown option(s) {', '.join(sorted(unknown))}"
                )
            return cls(**value)
        raise IllegalArgumentError("options: Must be a mapping or Options!")

    def override_for(self, stage: HookStage) -> HookFn | None:
        return getattr(self, stage.attribute)

    def resolve(self, definition: ResourceDefinition) -> Options:
        """Return a copy with resource defaults filled in."""
        return replace(
            self,
            eager_inject=(
                definition.eager_inject if self.eager_inject is None else self.eager_inject
            ),
            notify=definition.notify if self.notify is None else self.notify,
            adapter=self.adapter or definition.default_adapter,
            params=dict(self.params),
        )
