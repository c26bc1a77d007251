"""
Sync Engine -- one full pass between the local store and the remote.

    quotesync sync now  ->  push pending creates -> fetch page
                            -> reconcile -> persist

A failing step aborts the rest of the cycle. Work already committed
(a create that succeeded before a later fetch failed) stays.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from ..config import QuotesyncConfig, load_config
from ..models import SyncReport, SyncState, SyncStatus, utcnow
from ..store import QuoteStore
from .conflicts import ConflictResolver
from .fingerprint import fingerprint
from .reconciler import Reconciler
from .remote import RemoteBackend, RemoteError, create_remote

logger = logging.getLogger("quotesync.sync.engine")

STATE_FILE = "sync-state.json"
LOCAL_EDIT_MARKER = " (edited locally)"


class SyncEngine:
    """Orchestrates sync cycles and conflict resolution for one home.

    Args:
        home: quotesync home directory.
        config: Overrides ``<home>/config.yaml`` when given.
        remote: Overrides the backend built from config.
    """

    def __init__(
        self,
        home: Path,
        config: Optional[QuotesyncConfig] = None,
        remote: Optional[RemoteBackend] = None,
    ):
        self.home = Path(home).expanduser()
        self.home.mkdir(parents=True, exist_ok=True)

        self.config = config or load_config(self.home)
        self.store = QuoteStore(self.home)
        self.remote = remote or create_remote(self.config)
        self.resolver = ConflictResolver(self.store, self.remote)
        self.state = self._load_state()
        self._busy = threading.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _load_state(self) -> SyncState:
        state_file = self.home / STATE_FILE
        if state_file.exists():
            try:
                data = json.loads(state_file.read_text(encoding="utf-8"))
                return SyncState(**data)
            except (json.JSONDecodeError, ValueError, TypeError) as exc:
                logger.warning("Failed to load sync state: %s", exc)
        return SyncState()

    def _save_state(self) -> None:
        (self.home / STATE_FILE).write_text(
            self.state.model_dump_json(indent=2), encoding="utf-8"
        )

    @property
    def busy(self) -> bool:
        """True while a sync cycle is in flight."""
        return self._busy.locked()

    # ------------------------------------------------------------------
    # Cycle steps
    # ------------------------------------------------------------------

    def push_pending_creates(self, created: Optional[list[str]] = None) -> list[str]:
        """Create every pending local quote on the remote.

        Each success is persisted immediately so it survives a later
        failure in the same cycle.

        Args:
            created: List to append new ids to as they succeed.

        Returns:
            list[str]: Ids the created quotes are now stored under.

        Raises:
            RemoteError: On the first failed create.
        """
        created = created if created is not None else []
        with self.store.transaction():
            for quote in self.store.pending_creates():
                temp_id = quote.id
                new_id = self.remote.create_quote(quote)

                if new_id != temp_id and self.store.get(new_id) is not None:
                    logger.warning(
                        "Remote id %s for %s is already taken locally; keeping %s",
                        new_id, temp_id, temp_id,
                    )
                    new_id = temp_id

                updated = quote.model_copy(update={"id": new_id, "pending_create": False})
                self.store.replace(temp_id, updated)
                self.store.set_shadow(new_id, fingerprint(updated))
                self.store.save_quotes()
                self.store.save_shadow()

                self.state.created_count += 1
                created.append(new_id)
                logger.info("Created %s on %s as %s", temp_id, self.remote.name, new_id)
        return created

    def sync_now(self) -> SyncReport:
        """Run one sync cycle.

        Tables and sync state are reloaded from disk under the store's
        transaction, so work saved by other processes is kept.

        Never raises for remote failures; the outcome is in the report.
        A call made while another cycle runs returns ``skipped``.
        """
        if not self._busy.acquire(blocking=False):
            logger.info("Sync already in progress, skipping")
            return SyncReport(status=SyncStatus.SKIPPED, message="Sync already in progress.")

        created: list[str] = []
        try:
            with self.store.transaction():
                self.state = self._load_state()
                self.state.last_attempt = utcnow()
                try:
                    self.push_pending_creates(created)
                    remote_quotes = self.remote.fetch_quotes(self.config.fetch_limit)
                    result = Reconciler(self.store).reconcile(remote_quotes)
                    self.store.save_all()
                except RemoteError as exc:
                    logger.error("Sync failed: %s", exc)
                    self.state.last_error = str(exc)
                    self._save_state()
                    return SyncReport(
                        status=SyncStatus.FAILED,
                        message=f"Sync failed: {exc}",
                        created=created,
                    )

                finished = utcnow()
                self.state.last_sync = finished
                self.state.last_error = None
                self.state.sync_count += 1
                self._save_state()
        finally:
            self._busy.release()

        logger.info(
            "Sync complete: %d created, %d added, %d overwritten, %d new conflict(s)",
            len(created), len(result.added), len(result.overwritten), len(result.conflicts),
        )
        return SyncReport(
            status=SyncStatus.OK,
            message=f"Synced at {finished.astimezone().strftime('%H:%M:%S')}",
            created=created,
            added=result.added,
            overwritten=result.overwritten,
            conflicts=result.conflicts,
            finished_at=finished,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def simulate_conflict(self) -> Optional[SyncReport]:
        """Edit the first quote locally, leave its shadow, then sync.

        Returns:
            The sync report, or None if there are no quotes.
        """
        with self.store.transaction():
            if not self.store.quotes:
                return None
            first = self.store.quotes[0]
            edited = first.model_copy(
                update={"text": first.text + LOCAL_EDIT_MARKER, "updated_at": utcnow()}
            )
            self.store.replace(first.id, edited)
            self.store.save_quotes()
        logger.info("Simulated local edit of quote %s", first.id)
        return self.sync_now()

    def status(self) -> dict:
        """Summarize sync state and store contents."""
        return {
            "state": self.state.model_dump(mode="json"),
            "remote": self.remote.name,
            "quotes": len(self.store.quotes),
            "pending_creates": len(self.store.pending_creates()),
            "unresolved_conflicts": len(self.store.unresolved_conflicts()),
            "categories": self.store.categories(),
            "sync_interval": self.config.sync_interval,
            "busy": self.busy,
        }
