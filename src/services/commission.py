"""Commission calculation - static tier schedule and configurable rule tables."""

from decimal import Decimal
from typing import Iterable, Optional, Sequence

from src.models.commission_rule import CommissionRule
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Tier boundaries (NPR)
TIER_ONE_CEILING = Decimal("5000000")     # prices strictly below pay TIER_ONE_RATE
TIER_TWO_CEILING = Decimal("10000000")    # prices up to and including pay TIER_TWO_RATE

TIER_ONE_RATE = Decimal("0.02")
TIER_TWO_RATE = Decimal("0.0175")
TIER_THREE_RATE = Decimal("0.015")


def commission_rate(price: Decimal) -> Decimal:
    """
    Rate from the static three-tier schedule.

    price < 5,000,000 -> 2%; 5,000,000 <= price <= 10,000,000 -> 1.75%;
    price > 10,000,000 -> 1.5%. Exactly 5,000,000 lands in the second tier.
    """
    if price < TIER_ONE_CEILING:
        return TIER_ONE_RATE
    if price <= TIER_TWO_CEILING:
        return TIER_TWO_RATE
    return TIER_THREE_RATE


def calculate_commission(price: Decimal) -> Decimal:
    """Commission for a price under the static schedule (exact, unrounded)."""
    return price * commission_rate(price)


def find_matching_rule(price: Decimal, rules: Iterable[CommissionRule]) -> Optional[CommissionRule]:
    """Return the first rule, in stored order, whose bracket contains price."""
    for rule in rules:
        if rule.matches(price):
            return rule
    return None


def evaluate_rule_table(price: Decimal, rules: Iterable[CommissionRule]) -> Decimal:
    """
    Commission from a configured rule table.

    First match wins, so overlapping brackets resolve by table order.
    No matching rule yields zero.
    """
    rule = find_matching_rule(price, rules)
    if rule is None:
        logger.debug("No commission rule matched price", price=str(price))
        return Decimal(0)
    return price * rule.rate


def validate_commission_rules(rules: Sequence[CommissionRule]) -> list[str]:
    """
    Report problems in a rule table without repairing it.

    Checks inverted brackets, rates outside [0, 1], descending order and
    overlapping brackets. Both bounds are inclusive, so two rules sharing a
    boundary value overlap at that price.
    """
    issues: list[str] = []

    for index, rule in enumerate(rules):
        if rule.min_price > rule.max_price:
            issues.append(
                f"rule {index} ({rule.id}): min_price {rule.min_price} exceeds max_price {rule.max_price}"
            )
        if not Decimal(0) <= rule.rate <= Decimal(1):
            issues.append(f"rule {index} ({rule.id}): rate {rule.rate} outside [0, 1]")

    for index in range(1, len(rules)):
        previous, current = rules[index - 1], rules[index]
        if current.min_price < previous.min_price:
            issues.append(
                f"rule {index} ({current.id}): min_price {current.min_price} "
                f"is below preceding rule's {previous.min_price}"
            )

    for i in range(len(rules)):
        for j in range(i + 1, len(rules)):
            first, second = rules[i], rules[j]
            low = max(first.min_price, second.min_price)
            high = min(first.max_price, second.max_price)
            if low <= high:
                issues.append(
                    f"rules {i} ({first.id}) and {j} ({second.id}) overlap on [{low}, {high}]"
                )

    return issues
