"""Validation boundary for listing submissions."""

from decimal import Decimal
from typing import Any, Mapping, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, ValidationError, field_validator

from src.models.listing import PropertyListingDto, PropertyType
from src.utils.errors import ListingValidationError

MIN_LISTING_PRICE = Decimal("100000")       # 1 Lakh
MAX_LISTING_PRICE = Decimal("100000000")    # 10 Crore


class ListingSubmission(BaseModel):
    """Listing data as submitted by a broker."""
    id: Optional[str] = Field(None, description="Listing ID, required for updates")
    property_type: PropertyType = Field(..., description="Property category")
    location: str = Field(..., max_length=200, description="City, district or address")
    price: Decimal = Field(..., ge=MIN_LISTING_PRICE, le=MAX_LISTING_PRICE, description="Asking price (NPR)")
    features: str = Field(..., description="Key features")
    description: str = Field(..., max_length=1000, description="Listing description")
    image_url: str = Field(default="", description="Absolute http(s) image URL")
    broker_id: str = Field(..., description="Owning broker ID")

    @field_validator("location", "features", "description", "broker_id")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @field_validator("image_url")
    @classmethod
    def absolute_http_url(cls, value: str) -> str:
        if not value:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be an absolute http or https URL")
        return value


def validate_listing_submission(data: Mapping[str, Any]) -> PropertyListingDto:
    """
    Validate raw submission data and return the DTO the listing service accepts.

    Raises ListingValidationError listing every invalid field. Any commission
    in the payload is dropped; the service derives it from price.
    """
    try:
        submission = ListingSubmission.model_validate(dict(data))
    except ValidationError as e:
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            for error in e.errors()
        ]
        raise ListingValidationError(errors) from e

    return PropertyListingDto(**submission.model_dump())
