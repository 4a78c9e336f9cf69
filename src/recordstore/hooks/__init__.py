"""recordstore lifecycle hook system.

Provides the extension points run by the create and update pipelines:
- beforeValidate / validate / afterValidate: shape and check the attrs
- beforeCreate: last change before the adapter is called
- afterCreate: runs on the deserialized adapter response
- beforeUpdate / afterUpdate: bracket the adapter's update call

Hooks are resolved per call: a function passed in Options wins over the
resource definition's hook for the same stage.

Usage:
    from recordstore.hooks import hook

    @hook("requireAuthor")
    def require_author(resource_name, attrs):
        if not attrs.get("author"):
            raise ValueError("author is required")
"""

from recordstore.hooks.registry import HookRegistry, hook
from recordstore.hooks.types import (
    CREATE_STAGES,
    VALID_HOOK_POINTS,
    HookFn,
    HookStage,
    Options,
    ResourceHooks,
)

__all__ = [
    "CREATE_STAGES",
    "HookFn",
    "HookRegistry",
    "HookStage",
    "Options",
    "ResourceHooks",
    "VALID_HOOK_POINTS",
    "hook",
]
