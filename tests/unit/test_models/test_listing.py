"""Tests for listing and commission rule models."""

import pytest
from decimal import Decimal
from pydantic import ValidationError

from src.models.commission_rule import CommissionRule
from src.models.listing import PropertyListing, PropertyListingDto, PropertyType, to_listing_dto


@pytest.mark.unit
def test_property_listing_defaults():
    """Test listing creation with only required fields."""
    listing = PropertyListing(
        id="01J8Z3NDEKTSV4RRFFQ69G5FA1",
        property_type=PropertyType.HOUSE,
        location="Kathmandu",
        price=Decimal("4500000"),
        broker_id="broker-1"
    )

    assert listing.features == ""
    assert listing.description == ""
    assert listing.image_url == ""
    assert listing.commission == Decimal(0)


@pytest.mark.unit
def test_property_listing_missing_required_fields():
    """Test that price, location, category and broker are required."""
    with pytest.raises(ValidationError):
        PropertyListing(id="01J8Z3NDEKTSV4RRFFQ69G5FA1", location="Kathmandu")


@pytest.mark.unit
def test_property_type_parses_string_value():
    """Test that stored string categories parse into the enum."""
    listing = PropertyListing.model_validate({
        "id": "01J8Z3NDEKTSV4RRFFQ69G5FA1",
        "property_type": "Land",
        "location": "Lalitpur",
        "price": "12000000",
        "broker_id": "broker-1",
        "commission": "180000.000",
    })

    assert listing.property_type is PropertyType.LAND
    assert listing.price == Decimal("12000000")
    assert listing.commission == Decimal("180000")


@pytest.mark.unit
def test_property_listing_json_dump_round_trips_decimals():
    """Test that stored rows keep decimal precision."""
    listing = PropertyListing(
        id="01J8Z3NDEKTSV4RRFFQ69G5FA1",
        property_type=PropertyType.APARTMENT,
        location="Kathmandu",
        price=Decimal("4999999.99"),
        broker_id="broker-1",
        commission=Decimal("99999.9998")
    )
    row = listing.model_dump(mode="json")

    assert row["property_type"] == "Apartment"
    assert PropertyListing.model_validate(row).commission == Decimal("99999.9998")


@pytest.mark.unit
def test_to_listing_dto_copies_every_field():
    """Test the entity to read-model projection."""
    listing = PropertyListing(
        id="01J8Z3NDEKTSV4RRFFQ69G5FA2",
        property_type=PropertyType.HOUSE,
        location="Bhaktapur",
        price=Decimal("7500000"),
        features="3 Floors, Garden, Garage",
        description="Spacious house",
        image_url="/img/house.jpg",
        broker_id="broker-1",
        commission=Decimal("131250")
    )
    dto = to_listing_dto(listing)

    assert dto.model_dump() == listing.model_dump()


@pytest.mark.unit
def test_listing_dto_is_frozen():
    """Test that cached projections cannot be mutated by readers."""
    dto = PropertyListingDto(
        id="01J8Z3NDEKTSV4RRFFQ69G5FA2",
        property_type=PropertyType.HOUSE,
        location="Bhaktapur",
        price=Decimal("7500000"),
        broker_id="broker-1"
    )

    with pytest.raises(ValidationError):
        dto.price = Decimal("1")


@pytest.mark.unit
def test_commission_rule_bounds_are_inclusive():
    """Test that both bracket bounds match."""
    rule = CommissionRule(
        id="r1",
        min_price=Decimal("5000000"),
        max_price=Decimal("10000000"),
        rate=Decimal("0.0175")
    )

    assert rule.matches(Decimal("5000000"))
    assert rule.matches(Decimal("10000000"))
    assert not rule.matches(Decimal("4999999.99"))
    assert not rule.matches(Decimal("10000000.01"))
