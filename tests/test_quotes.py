"""Tests for quote actions: add, filter, random."""

from __future__ import annotations

import random
import re
from pathlib import Path

import pytest

from quotesync.models import QuoteSource
from quotesync.quotes import (
    QuoteValidationError,
    add_quote,
    effective_category,
    filter_quotes,
    is_temporary_id,
    random_quote,
    temporary_id,
)
from quotesync.store import QuoteStore


class TestAddQuote:
    def test_adds_pending_local_quote(self, home: Path):
        store = QuoteStore(home)
        quote = add_quote(store, "  Stay hungry.  ", " Drive ")

        assert quote.text == "Stay hungry."
        assert quote.category == "Drive"
        assert quote.pending_create is True
        assert quote.source == QuoteSource.LOCAL
        assert is_temporary_id(quote.id)
        assert store.quotes[-1] is quote

    def test_persisted_immediately(self, home: Path):
        quote = add_quote(QuoteStore(home), "Stay hungry.", "Drive")
        reloaded = QuoteStore(home)
        assert reloaded.get(quote.id).pending_create is True

    @pytest.mark.parametrize("text,category", [("", "Drive"), ("   ", "Drive"), ("Text", ""), ("Text", "  ")])
    def test_blank_fields_rejected(self, home: Path, text, category):
        store = QuoteStore(home)
        with pytest.raises(QuoteValidationError):
            add_quote(store, text, category)
        assert len(store.quotes) == 3
        assert not (home / "quotes.json").exists()

    def test_temporary_id_format(self):
        assert re.fullmatch(r"tmp-\d+-[0-9a-z]{6}", temporary_id())


class TestFilter:
    def test_all(self, home: Path):
        store = QuoteStore(home)
        assert len(filter_quotes(store, "all")) == 3

    def test_by_category(self, home: Path):
        store = QuoteStore(home)
        rows = filter_quotes(store, "Motivation")
        assert [q.id for q in rows] == ["1"]

    def test_unknown_category_is_empty(self, home: Path):
        assert filter_quotes(QuoteStore(home), "Nope") == []

    def test_selection_remembered(self, home: Path):
        store = QuoteStore(home)
        filter_quotes(store, "Persistence")
        assert [q.id for q in filter_quotes(QuoteStore(home))] == ["2"]

    def test_stale_selection_falls_back_to_all(self, home: Path):
        store = QuoteStore(home)
        store.selected_category = "Vanished"
        assert effective_category(store) == "all"
        assert len(filter_quotes(store)) == 3


class TestRandom:
    def test_picks_from_collection(self, home: Path):
        store = QuoteStore(home)
        quote = random_quote(store, rng=random.Random(42))
        assert quote in store.quotes

    def test_ignores_filter(self, home: Path):
        store = QuoteStore(home)
        store.selected_category = "Motivation"
        rng = random.Random(0)
        seen = {random_quote(store, rng=rng).id for _ in range(50)}
        assert seen == {"1", "2", "3"}

    def test_empty(self, home: Path):
        (home / "quotes.json").write_text("[]")
        assert random_quote(QuoteStore(home)) is None
