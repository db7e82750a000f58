"""Seed sample listings and the default commission rule table."""

from decimal import Decimal

from ulid import ULID

from src.models.commission_rule import CommissionRule
from src.models.listing import PropertyListing, PropertyType
from src.services.commission import calculate_commission, validate_commission_rules
from src.services.repository import UnitOfWork
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

SAMPLE_LISTINGS = [
    {
        "property_type": PropertyType.APARTMENT,
        "location": "Kathmandu",
        "price": Decimal("4500000"),
        "features": "2BHK, Balcony, Parking",
        "description": "Cozy apartment near city center",
        "image_url": "/img/apartment.jpg",
    },
    {
        "property_type": PropertyType.HOUSE,
        "location": "Bhaktapur",
        "price": Decimal("7500000"),
        "features": "3 Floors, Garden, Garage",
        "description": "Spacious house with modern amenities",
        "image_url": "/img/house.jpg",
    },
    {
        "property_type": PropertyType.LAND,
        "location": "Lalitpur",
        "price": Decimal("12000000"),
        "features": "10 Aana Plot",
        "description": "Prime residential land",
        "image_url": "/img/land.jpg",
    },
]

# (min_price, max_price, rate). Brackets share their boundary prices.
DEFAULT_COMMISSION_RULES = [
    (Decimal("0"), Decimal("5000000"), Decimal("0.02")),
    (Decimal("5000000"), Decimal("10000000"), Decimal("0.0175")),
    (Decimal("10000000"), Decimal("999999999"), Decimal("0.015")),
]


async def seed_database(unit_of_work: UnitOfWork, broker_id: str) -> int:
    """
    Insert sample listings and default commission rules into empty tables.

    Safe to run repeatedly: a table that already has rows is left alone.
    Returns the number of rows written.
    """
    listings = unit_of_work.repository(PropertyListing)
    rules = unit_of_work.repository(CommissionRule)

    if not await listings.get_all():
        for sample in SAMPLE_LISTINGS:
            listings.add(PropertyListing(
                id=str(ULID()),
                broker_id=broker_id,
                commission=calculate_commission(sample["price"]),
                **sample,
            ))

    existing_rules = await rules.get_all()
    if not existing_rules:
        for min_price, max_price, rate in DEFAULT_COMMISSION_RULES:
            rules.add(CommissionRule(id=str(ULID()), min_price=min_price, max_price=max_price, rate=rate))

    written = await unit_of_work.commit()

    rule_table = existing_rules or await rules.get_all()
    issues = validate_commission_rules(rule_table)
    if issues:
        logger.warning(
            "Seeded commission rules overlap or are unordered; rule lookups use first match",
            issue_count=len(issues),
            issues=issues
        )

    logger.info("Database seeded", rows_written=written, broker_id=broker_id)
    return written
