"""
Quote actions: add, filter by category, pick one at random.
"""

from __future__ import annotations

import logging
import random
import string
import time
from typing import Optional

from .models import Quote, QuoteSource, utcnow
from .store import ALL_CATEGORIES, QuoteStore

logger = logging.getLogger("quotesync.quotes")

TEMP_ID_PREFIX = "tmp-"
_ID_ALPHABET = string.digits + string.ascii_lowercase


class QuoteValidationError(ValueError):
    """Raised when a new quote is missing a required field."""


def temporary_id() -> str:
    """Client-side id used until the remote assigns a real one."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=6))
    return f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}-{suffix}"


def is_temporary_id(quote_id: str) -> bool:
    return quote_id.startswith(TEMP_ID_PREFIX)


def add_quote(store: QuoteStore, text: str, category: str) -> Quote:
    """Store a new quote locally and mark it for creation on the remote.

    Args:
        store: Quote store to add to.
        text: Quote text. Surrounding whitespace is stripped.
        category: Category label. Surrounding whitespace is stripped.

    Returns:
        Quote: the stored quote, carrying a temporary id.

    Raises:
        QuoteValidationError: If text or category is blank.
    """
    text = (text or "").strip()
    category = (category or "").strip()
    if not text:
        raise QuoteValidationError("Quote text is required.")
    if not category:
        raise QuoteValidationError("Quote category is required.")

    quote = Quote(
        id=temporary_id(),
        text=text,
        category=category,
        updated_at=utcnow(),
        source=QuoteSource.LOCAL,
        pending_create=True,
    )
    with store.transaction():
        store.add(quote)
        store.save_quotes()
    logger.info("Added quote %s in %s", quote.id, category)
    return quote


def effective_category(store: QuoteStore, category: Optional[str] = None) -> str:
    """Resolve which category filter applies.

    An explicit ``category`` wins. Otherwise the saved selection is
    used, provided it still names an existing category.
    """
    if category:
        return category
    saved = store.selected_category
    if saved == ALL_CATEGORIES or saved in store.categories():
        return saved
    return ALL_CATEGORIES


def filter_quotes(store: QuoteStore, category: Optional[str] = None) -> list[Quote]:
    """Return quotes in ``category`` and remember the selection.

    Passing ``None`` reuses the last selection; ``"all"`` disables
    filtering.
    """
    selected = effective_category(store, category)
    store.selected_category = selected
    if selected == ALL_CATEGORIES:
        return list(store.quotes)
    return [q for q in store.quotes if q.category == selected]


def random_quote(store: QuoteStore, rng: Optional[random.Random] = None) -> Optional[Quote]:
    """Pick any quote, ignoring the category filter. None if empty."""
    if not store.quotes:
        return None
    return (rng or random).choice(store.quotes)
