"""
Remote quote sources -- where the server copy of a quote lives.

The default backend talks to JSONPlaceholder's ``/posts`` resource,
which echoes writes without storing them. Posts map onto quotes as:

    post.title -> quote.category
    post.body  -> quote.text
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from ..config import QuotesyncConfig
from ..models import Quote, QuoteSource, utcnow

logger = logging.getLogger("quotesync.sync.remote")

DEFAULT_CATEGORY = "Server"
JSON_HEADERS = {"Content-Type": "application/json; charset=UTF-8"}


class RemoteError(RuntimeError):
    """Network failure or non-success response from the remote."""


def post_to_quote(post: Dict[str, Any]) -> Quote:
    """Map a remote post onto a server-sourced quote."""
    category = str(post.get("title") or DEFAULT_CATEGORY).strip() or DEFAULT_CATEGORY
    return Quote(
        id=str(post["id"]),
        text=str(post.get("body") or "").strip(),
        category=category,
        updated_at=utcnow(),
        source=QuoteSource.SERVER,
    )


def quote_to_payload(quote: Quote) -> Dict[str, Any]:
    """Body sent on create and update."""
    return {"title": quote.category, "body": quote.text, "userId": 1}


class RemoteBackend(ABC):
    """Abstract remote quote source."""

    @abstractmethod
    def fetch_quotes(self, limit: int) -> list[Quote]:
        """Fetch one page of remote quotes.

        Raises:
            RemoteError: On any failure.
        """

    @abstractmethod
    def create_quote(self, quote: Quote) -> str:
        """Create ``quote`` remotely and return the id the remote assigned.

        Raises:
            RemoteError: On any failure.
        """

    @abstractmethod
    def update_quote(self, quote: Quote) -> None:
        """Push new content for an existing remote quote.

        Raises:
            RemoteError: On any failure.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""


class PlaceholderBackend(RemoteBackend):
    """JSONPlaceholder ``/posts`` backend over HTTP.

    Args:
        api_base: Base URL, without the trailing ``/posts``.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, api_base: str, timeout: float = 30.0):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "jsonplaceholder"

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/posts"

    def _api_call(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Issue one request and decode the JSON reply.

        Raises:
            RemoteError: On transport failure, status >= 400,
                or a body that is not JSON.
        """
        try:
            resp = requests.request(
                method,
                url,
                headers=JSON_HEADERS if data is not None else None,
                json=data,
                params=params,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise RemoteError(f"{method} {url}: {exc}") from exc

        if resp.status_code >= 400:
            raise RemoteError(f"{method} {url}: {resp.status_code}")

        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteError(f"{method} {url}: invalid JSON response") from exc

    def fetch_quotes(self, limit: int) -> list[Quote]:
        posts = self._api_call("GET", self.endpoint, params={"_limit": limit})
        if not isinstance(posts, list):
            raise RemoteError(f"GET {self.endpoint}: expected a list of posts")
        quotes = [post_to_quote(p) for p in posts if isinstance(p, dict) and "id" in p]
        logger.debug("Fetched %d quote(s) from %s", len(quotes), self.name)
        return quotes

    def create_quote(self, quote: Quote) -> str:
        created = self._api_call("POST", self.endpoint, data=quote_to_payload(quote))
        new_id = created.get("id") if isinstance(created, dict) else None
        if new_id is None:
            logger.warning("Remote did not assign an id to %s", quote.id)
            return quote.id
        return str(new_id)

    def update_quote(self, quote: Quote) -> None:
        self._api_call("PATCH", f"{self.endpoint}/{quote.id}", data=quote_to_payload(quote))


def create_remote(config: QuotesyncConfig) -> RemoteBackend:
    """Build the remote backend described by ``config``."""
    return PlaceholderBackend(config.api_base, timeout=config.request_timeout)
