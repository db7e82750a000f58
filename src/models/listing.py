"""Property listing models."""

from decimal import Decimal
from enum import Enum
from typing import ClassVar, Optional
from pydantic import BaseModel, ConfigDict, Field

from src.utils.config import EngineConfig


class PropertyType(str, Enum):
    """Property categories."""
    HOUSE = "House"
    APARTMENT = "Apartment"
    LAND = "Land"
    COMMERCIAL = "Commercial"


class PropertyListing(BaseModel):
    """Persisted property listing owned by a broker."""
    table_name: ClassVar[str] = EngineConfig.LISTINGS_TABLE

    id: str = Field(..., description="Listing ID (ULID text)")
    property_type: PropertyType = Field(..., description="Property category")
    location: str = Field(..., description="City, district or address")
    price: Decimal = Field(..., description="Asking price (NPR)")
    features: str = Field(default="", description="Key features, e.g. '3BHK, Parking'")
    description: str = Field(default="", description="Listing description")
    image_url: str = Field(default="", description="Image URL or stored image reference")
    broker_id: str = Field(..., description="Owning broker ID (text FK)")
    commission: Decimal = Field(default=Decimal(0), description="Derived from price, never set by callers")


class PropertyListingDto(BaseModel):
    """Read model for listings; also the submission shape for add/update."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    property_type: PropertyType
    location: str
    price: Decimal
    features: str = ""
    description: str = ""
    image_url: str = ""
    broker_id: str
    commission: Decimal = Decimal(0)


def to_listing_dto(listing: PropertyListing) -> PropertyListingDto:
    """Project a persisted listing into its read model."""
    return PropertyListingDto(
        id=listing.id,
        property_type=listing.property_type,
        location=listing.location,
        price=listing.price,
        features=listing.features,
        description=listing.description,
        image_url=listing.image_url,
        broker_id=listing.broker_id,
        commission=listing.commission,
    )
