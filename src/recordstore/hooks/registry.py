"""Hook registry for recordstore.

Resource metadata (YAML) refers to hooks by name. This registry maps those
names to functions and records which lifecycle stages each hook may be
attached to, so a definition wiring a hook to the wrong stage fails at load
time instead of mid-pipeline.
"""

from collections.abc import Callable, Iterable

from recordstore.hooks.types import VALID_HOOK_POINTS, HookFn, HookStage

StageSpec = Iterable[HookStage | str] | None


class HookRegistry:
    """Registry for named hook implementations.

    Hooks must be registered before a resource definition can reference
    them. Registration is typically done at import time via the @hook
    decorator. A hook registered without ``stages`` fits every stage.

    Example:
        @hook("requireAuthor", stages=["validate"])
        def require_author(resource_name, attrs):
            if not attrs.get("author"):
                raise ValueError("author is required")
    """

    _hooks: dict[str, HookFn] = {}
    _stages: dict[str, frozenset[HookStage]] = {}

    @classmethod
    def register(cls, name: str, hook_fn: HookFn, stages: StageSpec = None) -> None:
        """Register a hook function by name.

        Idempotent: re-registering the same name is a no-op.

        Args:
            name: Unique identifier for the hook
            hook_fn: Sync or async function implementing the hook
            stages: Stages (enum members or metadata names) the hook may be
                attached to. None allows all of them.

        Raises:
            ValueError: If ``stages`` names an unknown stage
        """
        if name in cls._hooks:
            return
        allowed = cls._coerce_stages(name, stages)
        cls._hooks[name] = hook_fn
        cls._stages[name] = allowed

    @staticmethod
    def _coerce_stages(name: str, stages: StageSpec) -> frozenset[HookStage]:
        if stages is None:
            return frozenset(HookStage)
        if isinstance(stages, (str, HookStage)):
            stages = [stages]
        result = set()
        for stage in stages:
            if isinstance(stage, HookStage):
                result.add(stage)
            elif stage in VALID_HOOK_POINTS:
                result.add(HookStage(stage))
            else:
                raise ValueError(
                    f"Hook '{name}' declares unknown stage '{stage}'. "
                    f"Valid stages: {', '.join(VALID_HOOK_POINTS)}"
                )
        return frozenset(result)

    @classmethod
    def get(cls, name: str, stage: HookStage | None = None) -> HookFn:
        """Get a registered hook function by name.

        When ``stage`` is given the hook must have been registered for it.

        Raises:
            ValueError: If hook is not registered, or not allowed at ``stage``
        """
        if name not in cls._hooks:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be registered before resources are loaded."
            )
        if stage is not None and stage not in cls._stages[name]:
            raise ValueError(
                f"Hook '{name}' cannot be attached to '{stage.value}'; "
                f"it is registered for: {', '.join(cls.stages_for(name))}"
            )
        return cls._hooks[name]

    @classmethod
    def stages_for(cls, name: str) -> tuple[str, ...]:
        """Metadata names of the stages ``name`` may be attached to, in pipeline order."""
        allowed = cls._stages.get(name, frozenset())
        return tuple(stage.value for stage in HookStage if stage in allowed)

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._hooks

    @classmethod
    def list_registered(cls) -> list[str]:
        """List all registered hook names."""
        return sorted(cls._hooks.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._hooks.clear()
        cls._stages.clear()


def hook(name: str, stages: StageSpec = None) -> Callable[[HookFn], HookFn]:
    """Decorator to register a hook function.

    Usage:
        @hook("stampCreatedAt", stages=["beforeCreate"])
        async def stamp_created_at(resource_name, attrs):
            ...
    """

    def decorator(fn: HookFn) -> HookFn:
        HookRegistry.register(name, fn, stages)
        return fn

    return decorator
