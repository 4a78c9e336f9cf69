"""Optimistic ("eager") injection and its rollback.

An EagerInjection puts the in-flight attrs into the store before the
adapter answers. Once the pipeline ends it is either reconciled with the
adapter's authoritative identity or rolled back; in both cases the record is
never left in the store under its temporary identity.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from recordstore.errors import IllegalArgumentError
from recordstore.metadata.loader import ResourceDefinition
from recordstore.utils import generate_guid, is_blank

if TYPE_CHECKING:
    from recordstore.store.datastore import DataStore

logger = logging.getLogger(__name__)


class EagerInjection:
    """Tracks one optimistically injected record through a pipeline run.

    Attributes:
        temporary_id: Identity generated for the record, None if attrs had one
        current_id: Identity the record is stored under right now
        active: True while the store holds a record this object must settle
    """

    def __init__(self, store: DataStore, definition: ResourceDefinition, notify: bool = False):
        self.store = store
        self.definition = definition
        self.notify = notify
        self.temporary_id: Any = None
        self.current_id: Any = None
        self.active = False

    def inject(self, attrs: dict[str, Any]) -> dict[str, Any]:
        """Give ``attrs`` an identity if needed and inject them.

        The identity is written into ``attrs`` itself, so the adapter sees it.
        When a live record already owns the identity nothing is injected and
        the injection stays inactive.
        """
        name = self.definition.name
        id_attribute = self.definition.id_attribute
        if is_blank(attrs.get(id_attribute)):
            attrs[id_attribute] = generate_guid()
            self.temporary_id = attrs[id_attribute]
        else:
            existing = self.store.get(name, attrs[id_attribute])
            if existing is not None:
                # A live record owns the id; rollback must never eject it
                logger.debug(
                    "Skipping eager injection of %s %r: already in the store",
                    name,
                    attrs[id_attribute],
                )
                return existing

        record = self.store.inject(name, attrs, notify=self.notify)
        self.current_id = record[id_attribute]
        self.active = True
        logger.debug("Eagerly injected %s under %r", name, self.current_id)
        return record

    def reconcile(self, authoritative_id: Any) -> None:
        """Move the injected record to the identity the adapter assigned.

        Metadata is re-keyed and the record installed under the new identity
        before the temporary entry is removed.
        """
        name = self.definition.name
        if is_blank(authoritative_id):
            raise IllegalArgumentError(
                f"{name}: adapter response is missing "
                f"'{self.definition.id_attribute}'"
            )
        previous_id = self.current_id
        if authoritative_id == previous_id:
            return

        resource = self.store.index_for(name)
        record = resource.get(previous_id)
        if record is None:
            # Ejected by someone else while the adapter call was in flight
            self.current_id = authoritative_id
            self.active = False
            return

        if authoritative_id in resource:
            # Another live record owns the identity; the commit merges into it
            self.store.eject(name, previous_id, notify=False)
            self.current_id = authoritative_id
            self.active = False
            return

        resource.rekey_meta(previous_id, authoritative_id)
        record[self.definition.id_attribute] = authoritative_id
        resource.put(authoritative_id, record)
        self.store.eject(name, previous_id, notify=False)
        resource.collection.append(record)
        self.current_id = authoritative_id
        logger.debug("Re-keyed %s %r to %r", name, previous_id, authoritative_id)

    def rollback(self) -> None:
        """Eject whatever this injection left in the store, silently."""
        if self.active and self.current_id is not None:
            self.store.eject(self.definition.name, self.current_id, notify=False)
            logger.debug(
                "Rolled back eager injection of %s %r",
                self.definition.name,
                self.current_id,
            )
        self.active = False

    def complete(self) -> None:
        """Mark the injection settled after a successful commit."""
        self.active = False
