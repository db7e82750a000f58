"""Broker service - broker-owned listings and commission reporting."""

from decimal import Decimal
from typing import Optional

from src.models.commission_rule import CommissionRule
from src.models.listing import PropertyListing
from src.services.commission import evaluate_rule_table, validate_commission_rules
from src.services.repository import UnitOfWork
from src.utils.config import EngineConfig
from src.utils.errors import CommissionRuleError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


class BrokerService:
    """Reporting operations for brokers. Reads only; never touches the listing cache."""

    def __init__(self, unit_of_work: UnitOfWork, strict_rules: Optional[bool] = None):
        self._listings = unit_of_work.repository(PropertyListing)
        self._rules = unit_of_work.repository(CommissionRule)
        self.strict_rules = EngineConfig.COMMISSION_RULES_STRICT if strict_rules is None else strict_rules

    async def get_broker_listings(self, broker_id: str) -> list[PropertyListing]:
        """All listings owned by the broker, filtered by the store."""
        return await self._listings.find(broker_id=broker_id)

    async def get_total_commission(self, broker_id: str) -> Decimal:
        """Sum of stored commissions across the broker's listings."""
        listings = await self.get_broker_listings(broker_id)
        total = sum((listing.commission for listing in listings), Decimal(0))
        logger.info(
            "Computed broker commission total",
            broker_id=broker_id,
            listing_count=len(listings),
            total_commission=str(total)
        )
        return total

    async def calculate_commission(self, price: Decimal) -> Decimal:
        """
        Commission for a price using the stored rule table.

        Rules are scanned in stored order and the first bracket containing
        the price wins; no match yields zero. In strict mode a table with
        overlapping, unordered or malformed rules is rejected.
        """
        rules = await self._rules.get_all()

        issues = validate_commission_rules(rules)
        if issues:
            if self.strict_rules:
                raise CommissionRuleError(issues)
            logger.warning(
                "Commission rule table has issues; first matching rule wins",
                issue_count=len(issues),
                issues=issues
            )

        return evaluate_rule_table(price, rules)
