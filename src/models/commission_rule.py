"""Commission rule model."""

from decimal import Decimal
from typing import ClassVar
from pydantic import BaseModel, Field

from src.utils.config import EngineConfig


class CommissionRule(BaseModel):
    """Price bracket and the commission rate applied inside it."""
    table_name: ClassVar[str] = EngineConfig.COMMISSION_RULES_TABLE

    id: str = Field(..., description="Rule ID (ULID text)")
    min_price: Decimal = Field(..., description="Lower bound, inclusive")
    max_price: Decimal = Field(..., description="Upper bound, inclusive")
    rate: Decimal = Field(..., description="Rate as a fraction, e.g. 0.0175 = 1.75%")

    def matches(self, price: Decimal) -> bool:
        """Return True when price falls inside the bracket."""
        return self.min_price <= price <= self.max_price
