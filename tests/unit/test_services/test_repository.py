"""Tests for the repository facade, unit of work and memory store."""

import asyncio
import pytest
from decimal import Decimal

from src.models.commission_rule import CommissionRule
from src.models.listing import PropertyListing, PropertyType
from src.services.repository import MemoryStore, PendingWrite, UnitOfWork, WriteOp
from src.utils.errors import RepositoryError
from tests.utils.factories import BROKER_ID

KATHMANDU_ID = "01J8Z3NDEKTSV4RRFFQ69G5FA1"


def new_listing(listing_id: str = "01J8Z3NDEKTSV4RRFFQ69G5FB1") -> PropertyListing:
    return PropertyListing(
        id=listing_id,
        property_type=PropertyType.APARTMENT,
        location="Pokhara",
        price=Decimal("3000000"),
        broker_id=BROKER_ID,
        commission=Decimal("60000")
    )


@pytest.mark.unit
def test_repository_resolved_lazily_and_reused(store):
    """Test that one repository instance serves a model for the unit's lifetime."""
    unit_of_work = UnitOfWork(store)

    listings = unit_of_work.repository(PropertyListing)

    assert unit_of_work.repository(PropertyListing) is listings
    assert unit_of_work.repository(CommissionRule) is not listings
    assert listings.table == PropertyListing.table_name


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_by_id_missing_returns_none(store):
    """Test that a missing id is not an error."""
    listings = UnitOfWork(store).repository(PropertyListing)
    assert await listings.get_by_id("missing") is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_find_by_enum_and_text_criteria(store):
    """Test that criteria compose conjunctively and enums match stored values."""
    listings = UnitOfWork(store).repository(PropertyListing)

    houses = await listings.find(property_type=PropertyType.HOUSE)
    owned_houses = await listings.find(property_type=PropertyType.HOUSE, broker_id=BROKER_ID)
    none = await listings.find(property_type=PropertyType.HOUSE, broker_id="someone-else")

    assert {listing.location for listing in houses} == {"Kathmandu", "Bhaktapur"}
    assert owned_houses == houses
    assert none == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_writes_are_staged_until_commit(store):
    """Test that add does not reach the store before commit."""
    unit_of_work = UnitOfWork(store)
    listings = unit_of_work.repository(PropertyListing)

    listings.add(new_listing())

    assert len(unit_of_work.pending) == 1
    assert await listings.get_by_id("01J8Z3NDEKTSV4RRFFQ69G5FB1") is None

    assert await unit_of_work.commit() == 1
    assert unit_of_work.pending == ()
    assert (await listings.get_by_id("01J8Z3NDEKTSV4RRFFQ69G5FB1")).location == "Pokhara"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_commit_applies_mixed_batch(store):
    """Test add, update and delete finalized by one commit."""
    unit_of_work = UnitOfWork(store)
    listings = unit_of_work.repository(PropertyListing)

    existing = await listings.get_by_id(KATHMANDU_ID)
    existing.location = "Kathmandu, Baneshwor"
    listings.update(existing)
    listings.add(new_listing())
    listings.delete(await listings.get_by_id("01J8Z3NDEKTSV4RRFFQ69G5FA3"))

    assert await unit_of_work.commit() == 3
    assert store.calls["apply"] == 1
    assert {listing.location for listing in await listings.get_all()} == {
        "Kathmandu, Baneshwor", "Bhaktapur", "Pokhara"
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_commit_with_nothing_staged(store):
    """Test that an empty commit does not reach the store."""
    assert await UnitOfWork(store).commit() == 0
    assert store.calls["apply"] == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_store_batch_is_atomic(store):
    """Test that a failing write rolls back the whole batch."""
    unit_of_work = UnitOfWork(store)
    listings = unit_of_work.repository(PropertyListing)

    listings.add(new_listing())
    listings.delete(new_listing("01J8Z3NDEKTSV4RRFFQ69GNONE"))

    with pytest.raises(RepositoryError):
        await unit_of_work.commit()

    assert unit_of_work.pending == ()
    assert len(await listings.get_all()) == 3


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_store_rejects_duplicate_insert(store):
    """Test that inserting an existing id fails."""
    row = (await store.get_by_id(PropertyListing.table_name, KATHMANDU_ID))
    with pytest.raises(RepositoryError, match="Duplicate id"):
        await store.apply([PendingWrite(WriteOp.INSERT, PropertyListing.table_name, KATHMANDU_ID, row)])


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_store_returns_copies():
    """Test that callers cannot mutate stored rows through returned dicts."""
    store = MemoryStore({"things": [{"id": "1", "name": "original"}]})

    row = await store.get_by_id("things", "1")
    row["name"] = "changed"

    assert (await store.get_by_id("things", "1"))["name"] == "original"


class YieldingStore(MemoryStore):
    """MemoryStore whose apply suspends before writing, like a network round trip."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.batches = []

    async def apply(self, writes):
        self.batches.append([write.row_id for write in writes])
        await asyncio.sleep(0)
        return await super().apply(writes)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_overlapping_commits_apply_each_write_once():
    """Test that a write staged during a suspended commit goes out in the next batch only."""
    store = YieldingStore()
    unit_of_work = UnitOfWork(store)
    listings = unit_of_work.repository(PropertyListing)

    async def add_and_commit(listing_id):
        listings.add(new_listing(listing_id))
        return await unit_of_work.commit()

    results = await asyncio.gather(
        add_and_commit("01J8Z3NDEKTSV4RRFFQ69G5FB1"),
        add_and_commit("01J8Z3NDEKTSV4RRFFQ69G5FB2"),
    )

    assert results == [1, 1]
    assert store.batches == [["01J8Z3NDEKTSV4RRFFQ69G5FB1"], ["01J8Z3NDEKTSV4RRFFQ69G5FB2"]]
    assert len(await store.get_all(PropertyListing.table_name)) == 2
    assert unit_of_work.pending == ()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_find_compares_decimal_criteria_by_value(store):
    """Test that numeric criteria match regardless of how the number was written."""
    listings = UnitOfWork(store).repository(PropertyListing)

    matches = await listings.find(price=Decimal("4500000.00"))

    assert [listing.id for listing in matches] == [KATHMANDU_ID]
    assert await listings.find(price=Decimal("4500001")) == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_memory_store_decimal_criteria_against_text_column():
    """Test that a numeric criterion never matches a non-numeric column value."""
    store = MemoryStore({"things": [{"id": "1", "label": "n/a"}, {"id": "2", "label": None}]})

    assert await store.find("things", {"label": Decimal("1")}) == []
