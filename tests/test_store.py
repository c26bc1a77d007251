"""Tests for the on-disk quote store."""

from __future__ import annotations

import json
import threading
from pathlib import Path

from quotesync.models import Quote, QuoteContent
from quotesync.store import (
    ALL_CATEGORIES,
    CONFLICTS_FILE,
    QUOTES_FILE,
    SHADOW_FILE,
    QuoteStore,
    seed_quotes,
)


def _content(text: str, category: str = "X") -> QuoteContent:
    return QuoteContent(text=text, category=category)


class TestLoading:
    """Startup reads each table and falls back on bad data."""

    def test_empty_home_uses_seed(self, home: Path):
        store = QuoteStore(home)
        assert [q.id for q in store.quotes] == ["1", "2", "3"]
        assert store.shadow == {}
        assert store.conflicts == []

    def test_corrupt_quotes_use_seed(self, home: Path):
        (home / QUOTES_FILE).write_text("{not json")
        store = QuoteStore(home)
        assert [q.text for q in store.quotes] == [q.text for q in seed_quotes()]

    def test_wrong_shape_quotes_use_seed(self, home: Path):
        (home / QUOTES_FILE).write_text(json.dumps([{"id": "1"}]))
        store = QuoteStore(home)
        assert len(store.quotes) == 3

    def test_corrupt_shadow_is_empty(self, home: Path):
        (home / SHADOW_FILE).write_text(json.dumps({"5": {"nope": 1}}))
        assert QuoteStore(home).shadow == {}

    def test_corrupt_conflicts_are_empty(self, home: Path):
        (home / CONFLICTS_FILE).write_text("null")
        assert QuoteStore(home).conflicts == []

    def test_empty_list_is_kept(self, home: Path):
        """An explicitly empty collection is not replaced by the seed."""
        (home / QUOTES_FILE).write_text("[]")
        assert QuoteStore(home).quotes == []


class TestPersistence:
    def test_tables_survive_reload(self, home: Path):
        store = QuoteStore(home)
        store.add(Quote(id="7", text="Seven", category="Numbers"))
        store.set_shadow("7", "abc")
        store.add_conflict("7", _content("old"), _content("new"))
        store.save_all()

        reloaded = QuoteStore(home)
        assert reloaded.get("7").text == "Seven"
        assert reloaded.shadow_fingerprint("7") == "abc"
        assert reloaded.find_unresolved("7").server.text == "new"

    def test_shadow_file_shape(self, home: Path):
        store = QuoteStore(home)
        store.set_shadow("5", "fp")
        store.save_shadow()
        data = json.loads((home / SHADOW_FILE).read_text())
        assert data["5"]["fingerprint"] == "fp"
        assert "updated_at" in data["5"]


class TestQuotes:
    def test_replace(self, home: Path):
        store = QuoteStore(home)
        assert store.replace("1", Quote(id="1", text="new", category="X"))
        assert store.get("1").text == "new"

    def test_replace_missing(self, home: Path):
        store = QuoteStore(home)
        assert not store.replace("404", Quote(id="404", text="t", category="c"))

    def test_categories_sorted_and_unique(self, home: Path):
        store = QuoteStore(home)
        store.add(Quote(id="9", text="t", category="motivation"))
        store.add(Quote(id="10", text="t", category="Motivation"))
        assert store.categories() == ["Inspiration", "Motivation", "motivation", "Persistence"]

    def test_pending_creates(self, home: Path):
        store = QuoteStore(home)
        store.add(Quote(id="tmp-1-aaaaaa", text="t", category="c", pending_create=True))
        assert [q.id for q in store.pending_creates()] == ["tmp-1-aaaaaa"]


class TestConflicts:
    def test_one_open_conflict_per_id(self, home: Path):
        store = QuoteStore(home)
        assert store.add_conflict("5", _content("A"), _content("B"))
        assert not store.add_conflict("5", _content("A"), _content("C"))
        assert len(store.unresolved_conflicts()) == 1

    def test_new_conflict_after_resolution(self, home: Path):
        store = QuoteStore(home)
        store.add_conflict("5", _content("A"), _content("B"))
        assert store.mark_resolved("5") == 1
        assert store.add_conflict("5", _content("A"), _content("C"))
        assert len(store.conflicts) == 2
        assert len(store.unresolved_conflicts()) == 1

    def test_mark_resolved_unknown(self, home: Path):
        assert QuoteStore(home).mark_resolved("nope") == 0


class TestPreferences:
    def test_default_category(self, home: Path):
        assert QuoteStore(home).selected_category == ALL_CATEGORIES

    def test_selection_persists(self, home: Path):
        QuoteStore(home).selected_category = "Motivation"
        assert QuoteStore(home).selected_category == "Motivation"


class TestWriter:
    def test_writer_is_reentrant(self, home: Path):
        store = QuoteStore(home)
        with store.writer():
            with store.writer():
                store.add(Quote(id="8", text="t", category="c"))
        assert store.get("8") is not None


class TestTransaction:
    def test_reloads_changes_saved_elsewhere(self, home: Path):
        mine = QuoteStore(home)
        theirs = QuoteStore(home)
        theirs.add(Quote(id="9", text="Theirs", category="c"))
        theirs.save_quotes()

        with mine.transaction():
            assert mine.get("9").text == "Theirs"
            mine.add(Quote(id="10", text="Mine", category="c"))
            mine.save_quotes()

        reloaded = QuoteStore(home)
        assert reloaded.get("9") is not None
        assert reloaded.get("10") is not None

    def test_nested_transaction_does_not_reload(self, home: Path):
        store = QuoteStore(home)
        with store.transaction():
            store.add(Quote(id="9", text="unsaved", category="c"))
            with store.transaction():
                assert store.get("9") is not None

    def test_excludes_other_store_on_same_home(self, home: Path):
        first = QuoteStore(home)
        second = QuoteStore(home)
        entered = threading.Event()
        order = []

        def contender():
            with second.transaction():
                order.append("second")
                entered.set()

        with first.transaction():
            worker = threading.Thread(target=contender)
            worker.start()
            assert not entered.wait(timeout=0.3)
            order.append("first")

        worker.join(timeout=5)
        assert order == ["first", "second"]
