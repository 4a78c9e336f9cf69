"""Typed errors surfaced by the store.

Only precondition failures are typed. Hook, adapter and codec errors pass
through the pipeline unchanged.
"""


class RecordStoreError(Exception):
    """Base class for errors raised by recordstore itself."""


class NonexistentResourceError(RecordStoreError):
    """No resource definition is registered under the requested name."""


class IllegalArgumentError(RecordStoreError):
    """An argument violates the operation's contract (e.g. attrs not a dict)."""
