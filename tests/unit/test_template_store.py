"""Unit tests for calmaker.template_store."""

import logging

import pytest

from calmaker.exceptions import DuplicateTemplateError, TemplateNotFoundError
from calmaker.template_store import TemplateStore

pytestmark = pytest.mark.unit


class TestTemplateStore:
    """CRUD behavior of the in-memory store."""

    def test_add_get_and_order(self, make_template):
        store = TemplateStore()
        store.add(make_template(id="b"))
        store.add(make_template(id="a"))

        assert len(store) == 2
        assert "a" in store
        assert store.get("a").id == "a"
        assert store.get("missing") is None
        assert [t.id for t in store.list_templates()] == ["b", "a"]

    def test_add_duplicate_raises(self, make_template):
        store = TemplateStore([make_template(id="a")])
        with pytest.raises(DuplicateTemplateError):
            store.add(make_template(id="a"))

    def test_update_keeps_position(self, make_template):
        store = TemplateStore([make_template(id="a"), make_template(id="b")])
        store.update(make_template(id="a", title="Renamed"))

        assert [t.id for t in store] == ["a", "b"]
        assert store.get("a").title == "Renamed"

    def test_update_missing_raises(self, make_template):
        with pytest.raises(TemplateNotFoundError):
            TemplateStore().update(make_template(id="ghost"))

    def test_delete_returns_template(self, make_template):
        store = TemplateStore([make_template(id="a")])
        removed = store.delete("a")

        assert removed.id == "a"
        assert len(store) == 0

    def test_delete_missing_raises(self):
        with pytest.raises(TemplateNotFoundError, match="ghost"):
            TemplateStore().delete("ghost")

    def test_iteration_tolerates_mutation(self, make_template):
        store = TemplateStore([make_template(id="a"), make_template(id="b")])
        for template in store:
            store.delete(template.id)
        assert len(store) == 0


class TestTemplateStoreRecords:
    """Loading from and dumping to plain mappings."""

    def test_from_dicts_accepts_wire_records(self):
        store = TemplateStore.from_dicts(
            [
                {"id": "a", "title": "Algebra", "date": "2024-01-15", "recurrence": {"freq": "WEEKLY", "byWeekday": [1]}},
                {"id": "b", "title": "Biology", "anchor_date": "2024-01-16"},
            ]
        )
        assert [t.id for t in store] == ["a", "b"]
        assert store.get("a").recurrence.by_weekday == [1]

    def test_from_dicts_skips_invalid_and_duplicates(self, caplog):
        with caplog.at_level(logging.WARNING, logger="calmaker.template_store"):
            store = TemplateStore.from_dicts(
                [
                    {"id": "a", "date": "2024-01-15"},
                    {"title": "no id", "date": "2024-01-15"},
                    {"id": "a", "date": "2024-02-01"},
                ]
            )

        assert len(store) == 1
        assert store.get("a").anchor_date == "2024-01-15"
        assert "record 1" in caplog.text
        assert "duplicate" in caplog.text

    def test_to_dicts_uses_wire_aliases(self, make_template):
        store = TemplateStore([make_template(id="a", recurrence={"frequency": "MONTHLY", "until": "2024-06-30"})])
        record = store.to_dicts()[0]

        assert record["date"] == "2024-01-15"
        assert record["startTime"] == "09:00"
        assert record["recurrence"]["freq"] == "MONTHLY"
        assert record["recurrence"]["until"] == "2024-06-30"

    def test_records_reload_unchanged(self, make_template):
        store = TemplateStore([make_template(id="a", location="Hall B")])
        reloaded = TemplateStore.from_dicts(store.to_dicts())
        assert reloaded.list_templates() == store.list_templates()
