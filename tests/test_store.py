"""Tests for the entitlement store."""
from __future__ import annotations

import json

import pytest

from models import Entitlement, PlanId, get_plan_info
from store import EntitlementNotFoundError, EntitlementStore


def _entitlement(plan: PlanId = PlanId.MONTHLY, **kwargs) -> Entitlement:
    return Entitlement(plan=plan, plan_info=get_plan_info(plan), **kwargs)


class TestInMemory:

    def test_starts_unentitled(self, store):
        assert store.path is None
        assert store.load() is None
        assert store.is_entitled() is False

    def test_get_without_record_raises(self, store):
        with pytest.raises(EntitlementNotFoundError):
            store.get()

    def test_save_then_get(self, store):
        saved = store.save(_entitlement(PlanId.LIFETIME))
        assert store.get() == saved
        assert store.get().plan == PlanId.LIFETIME
        assert store.is_entitled() is True

    def test_unpaid_record_is_not_entitled(self, store):
        store.save(_entitlement(is_paid=False))
        assert store.is_entitled() is False

    def test_clear(self, store):
        store.save(_entitlement())
        store.clear()
        assert store.is_entitled() is False
        with pytest.raises(EntitlementNotFoundError):
            store.get()

    def test_clear_when_empty(self, store):
        store.clear()
        assert store.load() is None


class TestFileBacked:

    def test_save_writes_json(self, file_store):
        file_store.save(_entitlement(PlanId.YEARLY))
        data = json.loads(file_store.path.read_text(encoding="utf-8"))
        assert data["plan"] == "yearly"
        assert data["is_paid"] is True
        assert data["payment_method"] == "card"
        assert data["plan_info"]["name"] == "Pro plan"

    def test_record_survives_new_store(self, file_store):
        file_store.save(_entitlement(PlanId.YEARLY))
        reopened = EntitlementStore(file_store.path)
        assert reopened.is_entitled() is True
        assert reopened.get().plan == PlanId.YEARLY

    def test_sees_record_written_elsewhere(self, file_store):
        assert file_store.is_entitled() is False
        EntitlementStore(file_store.path).save(_entitlement())
        assert file_store.is_entitled() is True

    def test_creates_parent_directory(self, tmp_path):
        store = EntitlementStore(tmp_path / "nested" / "dir" / "e.json")
        store.save(_entitlement())
        assert store.path.exists()

    def test_clear_removes_file(self, file_store):
        file_store.save(_entitlement())
        file_store.clear()
        assert not file_store.path.exists()
        assert file_store.is_entitled() is False

    def test_clear_missing_file(self, file_store):
        file_store.clear()
        assert not file_store.path.exists()

    @pytest.mark.parametrize("content", ["not json", "{}", '{"plan": "weekly"}'])
    def test_corrupt_file_is_not_entitled(self, file_store, content):
        file_store.path.write_text(content, encoding="utf-8")
        assert file_store.load() is None
        assert file_store.is_entitled() is False

    @pytest.mark.parametrize("content", [b"\xff\xfe\x00garbage", b"\x80"])
    def test_undecodable_file_is_not_entitled(self, file_store, content):
        file_store.path.write_bytes(content)
        assert file_store.load() is None
        assert file_store.is_entitled() is False

    def test_accepts_string_path(self, tmp_path):
        store = EntitlementStore(str(tmp_path / "e.json"))
        store.save(_entitlement())
        assert EntitlementStore(tmp_path / "e.json").is_entitled() is True
