"""
Conflict resolution -- the user's say after a server-wins sync.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..models import ConflictAction, QuoteSource, utcnow
from ..store import QuoteStore
from .fingerprint import fingerprint
from .remote import RemoteBackend, RemoteError

logger = logging.getLogger("quotesync.sync.conflicts")


class ConflictResolver:
    """Closes open conflicts in a QuoteStore.

    Args:
        store: Store holding the conflict.
        remote: Backend used to propagate a kept local value.
            Optional; without it keep-local stays local.
    """

    def __init__(self, store: QuoteStore, remote: Optional[RemoteBackend] = None):
        self.store = store
        self.remote = remote

    def resolve(self, quote_id: str, action: ConflictAction) -> bool:
        """Dispatch to the handler for ``action``."""
        handlers = {
            ConflictAction.KEEP_SERVER: self.keep_server,
            ConflictAction.KEEP_LOCAL: self.keep_local,
            ConflictAction.DISMISS: self.dismiss,
        }
        return handlers[ConflictAction(action)](quote_id)

    def keep_server(self, quote_id: str) -> bool:
        """Accept the server value that the sync already applied.

        The shadow follows the stored record, which may be newer than
        the server snapshot kept in the conflict.
        """
        with self.store.transaction():
            conflict = self.store.find_unresolved(quote_id)
            if conflict is None:
                return False
            retained = self.store.get(quote_id) or conflict.server
            self.store.set_shadow(quote_id, fingerprint(retained))
            self.store.mark_resolved(quote_id)
            self.store.save_shadow()
            self.store.save_conflicts()
        logger.info("Conflict %s resolved: kept server", quote_id)
        return True

    def keep_local(self, quote_id: str) -> bool:
        """Restore the local snapshot over the server value."""
        with self.store.transaction():
            conflict = self.store.find_unresolved(quote_id)
            if conflict is None:
                return False

            quote = self.store.get(quote_id)
            if quote is not None:
                restored = quote.model_copy(
                    update={
                        "text": conflict.local.text,
                        "category": conflict.local.category,
                        "updated_at": utcnow(),
                        "source": QuoteSource.LOCAL,
                    }
                )
                self.store.replace(quote_id, restored)
                self.store.save_quotes()
                self._propagate(restored)

            self.store.set_shadow(quote_id, fingerprint(conflict.local))
            self.store.mark_resolved(quote_id)
            self.store.save_shadow()
            self.store.save_conflicts()
        logger.info("Conflict %s resolved: kept local", quote_id)
        return True

    def dismiss(self, quote_id: str) -> bool:
        """Close the conflict and leave records and shadow as they are."""
        with self.store.transaction():
            if not self.store.mark_resolved(quote_id):
                return False
            self.store.save_conflicts()
        logger.info("Conflict %s dismissed", quote_id)
        return True

    def _propagate(self, quote) -> None:
        if self.remote is None:
            return
        try:
            self.remote.update_quote(quote)
        except RemoteError as exc:
            # The placeholder remote never stores writes anyway.
            logger.debug("Ignoring failed update of %s: %s", quote.id, exc)
