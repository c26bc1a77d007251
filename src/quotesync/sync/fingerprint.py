"""
Content fingerprints -- detect changes to what a quote says.

Only text and category feed the digest. Ids, timestamps and the
source marker are bookkeeping and never make two quotes differ.
"""

from __future__ import annotations

import hashlib
import json
from typing import Union

from ..models import Quote, QuoteContent


def fingerprint(item: Union[Quote, QuoteContent]) -> str:
    """Return the SHA-256 hex digest of a quote's content.

    The payload is a sorted-key, compact JSON document so the
    digest is stable across calls and processes.
    """
    payload = json.dumps(
        {"category": item.category, "text": item.text},
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
