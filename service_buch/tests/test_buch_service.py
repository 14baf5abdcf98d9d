"""
Unit tests for the catalog service.
"""

import asyncio
from decimal import Decimal

import pytest

from service_buch.app.model.buch import BuchQuery
from service_buch.app.service.buch_service import BuchService, parse_version
from service_buch.app.service.exceptions import (
    TitelExistsError,
    ValidationError,
    VersionInvalid,
    VersionInvalidError,
    VersionMissing,
)
from shared.metrics import MetricsCollector


class TestParseVersion:
    """Test cases for parse_version."""

    @pytest.mark.parametrize("value,expected", [("0", 0), ("3", 3), ('"3"', 3), (" 12 ", 12)])
    def test_valid(self, value, expected):
        assert parse_version(value) == expected

    def test_missing(self):
        with pytest.raises(VersionMissing):
            parse_version(None)

    @pytest.mark.parametrize("value", ["", "-1", "1.5", "abc", '"', 'W/"1"'])
    def test_invalid(self, value):
        with pytest.raises(VersionInvalid):
            parse_version(value)


class TestCreate:
    """Test cases for BuchService.create."""

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_version(self, buch_service, buch):
        saved = await buch_service.create(buch)

        assert saved.id is not None
        assert saved.version == 0
        assert saved.created is not None
        assert saved.created == saved.updated
        assert await buch_service.find_by_id(saved.id) == saved

    @pytest.mark.asyncio
    async def test_create_ignores_supplied_id(self, buch_service, buch):
        buch.id = "00000000-0000-0000-0000-000000000001"
        buch.version = 5

        saved = await buch_service.create(buch)

        assert saved.id != "00000000-0000-0000-0000-000000000001"
        assert saved.version == 0

    @pytest.mark.asyncio
    async def test_create_with_discount_above_one(self, buch_service, buch):
        buch.discount = Decimal("5")

        saved = await buch_service.create(buch)

        assert (await buch_service.find_by_id(saved.id)).discount == Decimal("5")

    @pytest.mark.asyncio
    async def test_create_duplicate_title(self, buch_service, buch):
        first = await buch_service.create(buch)

        with pytest.raises(TitelExistsError):
            await buch_service.create(buch.model_copy())

        assert await buch_service.find_by_id(first.id) == first
        assert len(await buch_service.find()) == 1

    @pytest.mark.asyncio
    async def test_create_invalid_kind(self, buch_service, buch, notifier):
        buch.kind = "INVISIBLE"

        with pytest.raises(ValidationError) as exc_info:
            await buch_service.create(buch)

        assert "kind" in exc_info.value.messages
        assert await buch_service.find() == []
        notifier.buch_created.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_sends_notification(self, buch_service, buch, notifier, notifications):
        saved = await buch_service.create(buch)
        await notifications.drain()

        notifier.buch_created.assert_awaited_once_with(saved)

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_create(self, buch_service, buch, notifier, notifications):
        notifier.buch_created.side_effect = ConnectionRefusedError("smtp down")

        saved = await buch_service.create(buch)
        await notifications.drain()

        assert await buch_service.find_by_id(saved.id) is not None

    @pytest.mark.asyncio
    async def test_create_metrics(self, store, notifications, buch):
        metrics = MetricsCollector("buch")
        service = BuchService(store, notifications, metrics=metrics)

        await service.create(buch)
        with pytest.raises(TitelExistsError):
            await service.create(buch)

        registry = metrics.registry
        assert registry.get_sample_value(
            "catalog_writes_total", {"operation": "create", "outcome": "created"}) == 1.0
        assert registry.get_sample_value(
            "catalog_writes_total", {"operation": "create", "outcome": "duplicate"}) == 1.0


class TestUpdate:
    """Test cases for BuchService.update."""

    @pytest.fixture
    async def saved(self, buch_service, buch):
        return await buch_service.create(buch)

    @pytest.mark.asyncio
    async def test_update_increments_version(self, buch_service, saved):
        changed = saved.model_copy(update={"rating": 2})

        updated = await buch_service.update(changed, "0")

        assert updated.version == 1
        assert updated.rating == 2
        assert updated.created == saved.created
        stored = await buch_service.find_by_id(saved.id)
        assert stored.version == 1
        assert stored.rating == 2

    @pytest.mark.asyncio
    async def test_update_with_etag_value(self, buch_service, saved):
        updated = await buch_service.update(saved, '"0"')

        assert updated.version == 1

    @pytest.mark.asyncio
    async def test_update_with_lower_version_is_accepted(self, buch_service, saved):
        await buch_service.update(saved, "0")
        await buch_service.update(saved, "1")

        updated = await buch_service.update(saved, "0")

        assert updated.version == 3

    @pytest.mark.asyncio
    async def test_update_with_higher_version_conflicts(self, buch_service, saved):
        with pytest.raises(VersionInvalidError):
            await buch_service.update(saved, "1")

        assert (await buch_service.find_by_id(saved.id)).version == 0

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, buch_service, buch):
        buch.id = "00000000-0000-0000-0000-000000000099"

        with pytest.raises(VersionInvalidError):
            await buch_service.update(buch, "0")

    @pytest.mark.asyncio
    async def test_update_version_missing(self, buch_service, saved):
        with pytest.raises(VersionMissing):
            await buch_service.update(saved, None)

    @pytest.mark.asyncio
    async def test_update_version_invalid(self, buch_service, saved):
        with pytest.raises(VersionInvalid):
            await buch_service.update(saved, "latest")

    @pytest.mark.asyncio
    async def test_version_checked_before_fields(self, buch_service, saved):
        invalid = saved.model_copy(update={"kind": "INVISIBLE"})

        with pytest.raises(VersionMissing):
            await buch_service.update(invalid, None)

    @pytest.mark.asyncio
    async def test_update_invalid_fields(self, buch_service, saved):
        invalid = saved.model_copy(update={"kind": "INVISIBLE", "rating": 9})

        with pytest.raises(ValidationError) as exc_info:
            await buch_service.update(invalid, "0")

        assert set(exc_info.value.messages) == {"kind", "rating"}

    @pytest.mark.asyncio
    async def test_update_keeps_own_title(self, buch_service, saved):
        updated = await buch_service.update(saved.model_copy(update={"price": 12}), "0")

        assert updated.title == saved.title

    @pytest.mark.asyncio
    async def test_update_to_taken_title(self, buch_service, saved, buch):
        other = await buch_service.create(buch.model_copy(update={"title": "Beta"}))

        with pytest.raises(TitelExistsError):
            await buch_service.update(other.model_copy(update={"title": "Alpha"}), "0")

    @pytest.mark.asyncio
    async def test_concurrent_updates_increment_once_each(self, buch_service, saved):
        results = await asyncio.gather(*[
            buch_service.update(saved.model_copy(update={"rating": rating}), "0")
            for rating in range(5)
        ])

        assert sorted(result.version for result in results) == [1, 2, 3, 4, 5]
        assert (await buch_service.find_by_id(saved.id)).version == 5

    @pytest.mark.asyncio
    async def test_stale_update_after_concurrent_write(self, buch_service, saved):
        await buch_service.update(saved, "0")
        await buch_service.update(saved, "1")

        with pytest.raises(VersionInvalidError):
            await buch_service.update(saved, "3")


class TestRemoveAndFind:
    """Test cases for remove and the read operations."""

    @pytest.mark.asyncio
    async def test_remove_is_idempotent(self, buch_service, buch):
        saved = await buch_service.create(buch)

        await buch_service.remove(saved.id)
        assert await buch_service.find_by_id(saved.id) is None

        await buch_service.remove(saved.id)
        assert await buch_service.find_by_id(saved.id) is None

    @pytest.mark.asyncio
    async def test_remove_frees_title(self, buch_service, buch):
        saved = await buch_service.create(buch)
        await buch_service.remove(saved.id)

        again = await buch_service.create(buch)

        assert again.id != saved.id

    @pytest.mark.asyncio
    async def test_find_sorted_by_title(self, buch_service, buch):
        for title in ("Gamma", "Alpha", "Beta"):
            await buch_service.create(buch.model_copy(update={"title": title}))

        result = await buch_service.find()

        assert [b.title for b in result] == ["Alpha", "Beta", "Gamma"]

    @pytest.mark.asyncio
    async def test_find_by_query(self, buch_service, buch):
        await buch_service.create(buch)
        await buch_service.create(buch.model_copy(update={"title": "Beta", "keywords": ["PYTHON"]}))

        result = await buch_service.find(BuchQuery(keywords=["PYTHON"]))

        assert [b.title for b in result] == ["Beta"]
