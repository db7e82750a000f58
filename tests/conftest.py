"""Shared pytest fixtures and configuration."""

import os
import pytest
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LISTING_CACHE_TTL_SECONDS", "300")

from src.models.listing import PropertyListing, PropertyType
from src.services.listing_cache import ListingCache
from src.services.listing_service import ListingService
from src.services.repository import UnitOfWork
from tests.utils.factories import CountingStore, make_listing_row


@pytest.fixture
def sample_listing_rows():
    """Kathmandu house, Bhaktapur house, Lalitpur land."""
    return [
        make_listing_row("01J8Z3NDEKTSV4RRFFQ69G5FA1", "Kathmandu", PropertyType.HOUSE, "4500000"),
        make_listing_row("01J8Z3NDEKTSV4RRFFQ69G5FA2", "Bhaktapur", PropertyType.HOUSE, "7500000"),
        make_listing_row("01J8Z3NDEKTSV4RRFFQ69G5FA3", "Lalitpur", PropertyType.LAND, "12000000"),
    ]


@pytest.fixture
def store(sample_listing_rows):
    """Counting in-memory store preloaded with the sample listings."""
    return CountingStore({PropertyListing.table_name: sample_listing_rows})


@pytest.fixture
def empty_store():
    return CountingStore()


@pytest.fixture
def listing_cache():
    return ListingCache(ttl_seconds=300)


@pytest.fixture
def listing_service(store, listing_cache):
    return ListingService(UnitOfWork(store), listing_cache)


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2026-03-02 12:00:00") as frozen_time:
        yield frozen_time
