"""
Pydantic models for quotes, sync bookkeeping, and conflicts.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(timezone.utc)


class QuoteSource(str, Enum):
    """Where the current content of a quote came from."""

    LOCAL = "local"
    SERVER = "server"


class QuoteContent(BaseModel):
    """The meaningful part of a quote: what it says and where it is filed."""

    text: str
    category: str


class Quote(BaseModel):
    """A single quote in the local collection.

    Locally created quotes carry a temporary ``tmp-`` id and
    ``pending_create=True`` until the remote assigns a real id.
    """

    id: str
    text: str
    category: str
    updated_at: datetime = Field(default_factory=utcnow)
    source: QuoteSource = QuoteSource.LOCAL
    pending_create: bool = False

    @property
    def content(self) -> QuoteContent:
        return QuoteContent(text=self.text, category=self.category)


class ShadowEntry(BaseModel):
    """Fingerprint of a quote as it stood after the last successful sync."""

    fingerprint: str
    updated_at: datetime = Field(default_factory=utcnow)


class Conflict(BaseModel):
    """A divergence between local and server content awaiting a decision."""

    id: str
    local: QuoteContent
    server: QuoteContent
    resolved: bool = False
    created_at: datetime = Field(default_factory=utcnow)


class ConflictAction(str, Enum):
    """Ways a user can close a conflict."""

    KEEP_SERVER = "server"
    KEEP_LOCAL = "local"
    DISMISS = "dismiss"


class SyncStatus(str, Enum):
    """Outcome of one sync cycle."""

    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


class SyncReport(BaseModel):
    """What a single sync cycle did, and the message to show for it."""

    status: SyncStatus
    message: str
    created: list[str] = Field(default_factory=list)
    added: list[str] = Field(default_factory=list)
    overwritten: list[str] = Field(default_factory=list)
    conflicts: list[str] = Field(default_factory=list)
    finished_at: datetime = Field(default_factory=utcnow)

    @property
    def ok(self) -> bool:
        return self.status == SyncStatus.OK


class SyncState(BaseModel):
    """Sync bookkeeping persisted between runs."""

    last_sync: Optional[datetime] = None
    last_attempt: Optional[datetime] = None
    last_error: Optional[str] = None
    sync_count: int = 0
    created_count: int = 0
