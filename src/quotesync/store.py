"""
Quote store -- the local tables that survive between runs.

Three independently persisted tables plus a small preferences file:

    quotes.json       list of quotes
    shadow.json       id -> {fingerprint, updated_at}
    conflicts.json    list of conflicts
    preferences.json  last selected category

Every table is read once at startup. A missing or corrupt file
falls back to its default (the seed list, for quotes). Writers
take ``writer()`` so threads never interleave their mutations. A
read-modify-write that must see other processes' changes runs in
``transaction()``, which holds a lock file in the home directory and
reloads every table first.
"""

from __future__ import annotations

import fcntl
import json
import logging
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from .models import Conflict, Quote, QuoteContent, ShadowEntry, utcnow

logger = logging.getLogger("quotesync.store")

QUOTES_FILE = "quotes.json"
SHADOW_FILE = "shadow.json"
CONFLICTS_FILE = "conflicts.json"
PREFERENCES_FILE = "preferences.json"
LOCK_FILE = ".lock"

ALL_CATEGORIES = "all"

SEED_QUOTES = [
    ("1", "The best way to get started is to quit talking and begin doing.", "Motivation"),
    ("2", "Don't watch the clock; do what it does. Keep going.", "Persistence"),
    ("3", "Success is not in what you have, but who you are.", "Inspiration"),
]


def seed_quotes() -> list[Quote]:
    """Built-in quotes used when nothing has been stored yet."""
    return [Quote(id=qid, text=text, category=category) for qid, text, category in SEED_QUOTES]


class QuoteStore:
    """Owns the quote, shadow, and conflict tables for one home directory.

    Args:
        home: Directory holding the JSON tables. Created if missing.
    """

    def __init__(self, home: Path):
        self.home = Path(home).expanduser()
        self.home.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._depth = 0

        self.quotes: list[Quote] = self._load_quotes()
        self.shadow: dict[str, ShadowEntry] = self._load_shadow()
        self.conflicts: list[Conflict] = self._load_conflicts()

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def writer(self) -> Iterator["QuoteStore"]:
        """Hold exclusive write access to all tables."""
        with self._lock:
            yield self

    @contextmanager
    def transaction(self) -> Iterator["QuoteStore"]:
        """Exclusive read-modify-write across threads and processes.

        The outermost entry takes the home lock file and reloads all
        tables from disk, so changes saved by another process are
        never written over. Nested entries only re-enter the lock.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            with open(self.home / LOCK_FILE, "a+", encoding="utf-8") as lock_fh:
                fcntl.flock(lock_fh, fcntl.LOCK_EX)
                self._depth = 1
                try:
                    self.reload()
                    yield self
                finally:
                    self._depth = 0
                    fcntl.flock(lock_fh, fcntl.LOCK_UN)

    def reload(self) -> None:
        """Re-read all tables from disk."""
        with self._lock:
            self.quotes = self._load_quotes()
            self.shadow = self._load_shadow()
            self.conflicts = self._load_conflicts()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read_json(self, name: str) -> Optional[Any]:
        path = self.home / name
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Failed to read %s: %s", name, exc)
            return None

    def _load_quotes(self) -> list[Quote]:
        data = self._read_json(QUOTES_FILE)
        if not isinstance(data, list):
            return seed_quotes()
        try:
            return [Quote.model_validate(item) for item in data]
        except ValueError as exc:
            logger.warning("Discarding corrupt %s: %s", QUOTES_FILE, exc)
            return seed_quotes()

    def _load_shadow(self) -> dict[str, ShadowEntry]:
        data = self._read_json(SHADOW_FILE)
        if not isinstance(data, dict):
            return {}
        try:
            return {str(k): ShadowEntry.model_validate(v) for k, v in data.items()}
        except ValueError as exc:
            logger.warning("Discarding corrupt %s: %s", SHADOW_FILE, exc)
            return {}

    def _load_conflicts(self) -> list[Conflict]:
        data = self._read_json(CONFLICTS_FILE)
        if not isinstance(data, list):
            return []
        try:
            return [Conflict.model_validate(item) for item in data]
        except ValueError as exc:
            logger.warning("Discarding corrupt %s: %s", CONFLICTS_FILE, exc)
            return []

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def _write_json(self, name: str, data: Any) -> None:
        (self.home / name).write_text(json.dumps(data, indent=2), encoding="utf-8")

    def save_quotes(self) -> None:
        self._write_json(QUOTES_FILE, [q.model_dump(mode="json") for q in self.quotes])

    def save_shadow(self) -> None:
        self._write_json(
            SHADOW_FILE,
            {qid: entry.model_dump(mode="json") for qid, entry in self.shadow.items()},
        )

    def save_conflicts(self) -> None:
        self._write_json(CONFLICTS_FILE, [c.model_dump(mode="json") for c in self.conflicts])

    def save_all(self) -> None:
        """Persist all three tables."""
        with self._lock:
            self.save_quotes()
            self.save_shadow()
            self.save_conflicts()

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def get(self, quote_id: str) -> Optional[Quote]:
        for quote in self.quotes:
            if quote.id == quote_id:
                return quote
        return None

    def add(self, quote: Quote) -> None:
        with self._lock:
            self.quotes.append(quote)

    def replace(self, quote_id: str, quote: Quote) -> bool:
        """Swap the quote stored under ``quote_id`` for ``quote``.

        Returns:
            bool: False if no quote has that id.
        """
        with self._lock:
            for idx, existing in enumerate(self.quotes):
                if existing.id == quote_id:
                    self.quotes[idx] = quote
                    return True
        return False

    def pending_creates(self) -> list[Quote]:
        return [q for q in self.quotes if q.pending_create]

    def categories(self) -> list[str]:
        """Distinct categories, sorted case-insensitively."""
        return sorted({q.category for q in self.quotes}, key=lambda c: (c.casefold(), c))

    # ------------------------------------------------------------------
    # Shadow
    # ------------------------------------------------------------------

    def shadow_fingerprint(self, quote_id: str) -> Optional[str]:
        entry = self.shadow.get(quote_id)
        return entry.fingerprint if entry else None

    def set_shadow(self, quote_id: str, fingerprint: str) -> None:
        with self._lock:
            self.shadow[quote_id] = ShadowEntry(fingerprint=fingerprint, updated_at=utcnow())

    # ------------------------------------------------------------------
    # Conflicts
    # ------------------------------------------------------------------

    def unresolved_conflicts(self) -> list[Conflict]:
        return [c for c in self.conflicts if not c.resolved]

    def find_unresolved(self, quote_id: str) -> Optional[Conflict]:
        for conflict in self.conflicts:
            if conflict.id == quote_id and not conflict.resolved:
                return conflict
        return None

    def add_conflict(self, quote_id: str, local: QuoteContent, server: QuoteContent) -> bool:
        """Record a conflict unless one is already open for this id.

        Returns:
            bool: True if a new conflict was appended.
        """
        with self._lock:
            if self.find_unresolved(quote_id) is not None:
                return False
            self.conflicts.append(Conflict(id=quote_id, local=local, server=server))
            return True

    def mark_resolved(self, quote_id: str) -> int:
        """Close every open conflict for ``quote_id``. Returns how many."""
        closed = 0
        with self._lock:
            for conflict in self.conflicts:
                if conflict.id == quote_id and not conflict.resolved:
                    conflict.resolved = True
                    closed += 1
        return closed

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------

    @property
    def selected_category(self) -> str:
        data = self._read_json(PREFERENCES_FILE)
        if isinstance(data, dict) and isinstance(data.get("selected_category"), str):
            return data["selected_category"]
        return ALL_CATEGORIES

    @selected_category.setter
    def selected_category(self, category: str) -> None:
        self._write_json(PREFERENCES_FILE, {"selected_category": category})
