"""Shared test fixtures for quotesync."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from quotesync.config import QuotesyncConfig
from quotesync.models import Quote, QuoteSource
from quotesync.sync.remote import RemoteBackend, RemoteError


class FakeRemote(RemoteBackend):
    """In-memory remote that records every call.

    ``posts`` holds the server copy. Set ``fail_fetch`` or
    ``fail_create`` / ``fail_update`` to make calls raise.
    """

    def __init__(self, quotes: Optional[list[Quote]] = None, next_id: int = 101):
        self.posts: dict[str, Quote] = {q.id: q for q in (quotes or [])}
        self.next_id = next_id
        self.fixed_id: Optional[str] = None
        self.fail_fetch = False
        self.fail_create = False
        self.fail_update = False
        self.fetch_calls: list[int] = []
        self.created: list[Quote] = []
        self.updated: list[Quote] = []

    @property
    def name(self) -> str:
        return "fake"

    def fetch_quotes(self, limit: int) -> list[Quote]:
        self.fetch_calls.append(limit)
        if self.fail_fetch:
            raise RemoteError("GET /posts: 503")
        return [q.model_copy() for q in list(self.posts.values())[:limit]]

    def create_quote(self, quote: Quote) -> str:
        if self.fail_create:
            raise RemoteError("POST /posts: 500")
        self.created.append(quote)
        if self.fixed_id is not None:
            return self.fixed_id
        new_id = str(self.next_id)
        self.next_id += 1
        return new_id

    def update_quote(self, quote: Quote) -> None:
        if self.fail_update:
            raise RemoteError("PATCH /posts: 500")
        self.updated.append(quote)


def server_quote(quote_id: str, text: str, category: str) -> Quote:
    return Quote(id=quote_id, text=text, category=category, source=QuoteSource.SERVER)


@pytest.fixture
def home(tmp_path: Path) -> Path:
    """Provide an empty quotesync home directory."""
    home = tmp_path / ".quotesync"
    home.mkdir()
    return home


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def engine(home: Path, remote: FakeRemote):
    """A SyncEngine over an empty home and the fake remote."""
    from quotesync.sync.engine import SyncEngine

    return SyncEngine(home, config=QuotesyncConfig(fetch_limit=10), remote=remote)
