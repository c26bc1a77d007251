"""
Reconciler -- three-way merge of local quotes against a remote page.

For every remote quote the local copy, the remote copy and the
shadow (fingerprint at the last sync) are compared:

    missing locally     -> add it, shadow = remote
    same content        -> shadow = remote
    content diverges    -> server wins, conflict recorded, shadow = remote

A divergence always produces a conflict the user may override, even
when only the local side changed since the shadow. Local-only quotes
and pending creates are left alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..models import Quote
from ..store import QuoteStore
from .fingerprint import fingerprint

logger = logging.getLogger("quotesync.sync.reconciler")


@dataclass
class ReconcileResult:
    """Ids touched by one reconciliation pass, by outcome."""

    added: list[str] = field(default_factory=list)
    in_sync: list[str] = field(default_factory=list)
    overwritten: list[str] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)


class Reconciler:
    """Merges remote snapshots into a QuoteStore.

    Args:
        store: Store whose quotes, shadow and conflicts are updated.
    """

    def __init__(self, store: QuoteStore):
        self.store = store

    def reconcile(self, remote_quotes: Iterable[Quote]) -> ReconcileResult:
        """Apply one remote snapshot to the store's tables.

        Mutates the store in memory only; the caller persists.
        """
        result = ReconcileResult()
        remote_by_id = {str(q.id): q for q in remote_quotes}

        with self.store.writer():
            local_by_id = {
                q.id: q for q in self.store.quotes if not q.pending_create
            }

            for quote_id, remote in remote_by_id.items():
                local = local_by_id.get(quote_id)
                remote_fp = fingerprint(remote)

                if local is None:
                    self.store.add(remote.model_copy())
                    self.store.set_shadow(quote_id, remote_fp)
                    result.added.append(quote_id)
                    continue

                local_fp = fingerprint(local)
                if local_fp == remote_fp:
                    self.store.set_shadow(quote_id, remote_fp)
                    result.in_sync.append(quote_id)
                    continue

                shadow_fp = self.store.shadow_fingerprint(quote_id)
                if shadow_fp and shadow_fp not in (local_fp, remote_fp):
                    logger.info("Quote %s changed on both sides since last sync", quote_id)
                else:
                    logger.info("Quote %s diverged from server; applying server copy", quote_id)

                self.store.replace(quote_id, remote.model_copy())
                if self.store.add_conflict(quote_id, local.content, remote.content):
                    result.conflicts.append(quote_id)
                self.store.set_shadow(quote_id, remote_fp)
                result.overwritten.append(quote_id)

        return result
