"""Listing service - CRUD, cache discipline, commission and search over listings."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from ulid import ULID

from src.models.listing import PropertyListing, PropertyListingDto, PropertyType, to_listing_dto
from src.services.commission import calculate_commission
from src.services.file_storage import FileStorage, ImageUpload
from src.services.listing_cache import ListingCache
from src.services.repository import UnitOfWork
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)


def generate_listing_id() -> str:
    """Generate a text-based listing ID (ULID format)."""
    return str(ULID())


class WriteOutcome(str, Enum):
    """Result of a write operation."""
    APPLIED = "APPLIED"
    NO_OP = "NO_OP"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of add/update/delete; NO_OP means the target id did not exist."""
    outcome: WriteOutcome
    listing_id: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.outcome is WriteOutcome.APPLIED


class ListingService:
    """
    Listing operations for brokers and seekers.

    Writes compute commission from price with the static tier schedule,
    commit through the unit of work and only then invalidate the cache, so a
    failed commit keeps serving the last good snapshot. Reads of the full set
    and searches go through the cache; get_by_id goes to the repository.
    Update and delete of an unknown id are deliberate no-ops, not errors.
    """

    def __init__(
        self,
        unit_of_work: UnitOfWork,
        cache: ListingCache,
        file_storage: Optional[FileStorage] = None,
    ):
        self._unit_of_work = unit_of_work
        self._listings = unit_of_work.repository(PropertyListing)
        self._cache = cache
        self._file_storage = file_storage

    async def _load_listings(self) -> list[PropertyListingDto]:
        with log_timing("load_listings", logger=logger):
            listings = await self._listings.get_all()
        return [to_listing_dto(listing) for listing in listings]

    async def get_all(self) -> list[PropertyListingDto]:
        """Every listing, served from cache when fresh."""
        return await self._cache.get_or_fill(self._load_listings)

    async def get_by_id(self, listing_id: str) -> Optional[PropertyListingDto]:
        listing = await self._listings.get_by_id(listing_id)
        if listing is None:
            return None
        return to_listing_dto(listing)

    async def _resolve_image_url(self, dto: PropertyListingDto, image: Optional[ImageUpload]) -> str:
        if image is None:
            return dto.image_url
        if self._file_storage is None:
            raise ValueError("Image upload requires a file storage")
        return await self._file_storage.save(image.content, image.filename)

    async def add(self, dto: PropertyListingDto, image: Optional[ImageUpload] = None) -> WriteResult:
        """Create a listing with a fresh id and computed commission."""
        listing = PropertyListing(
            id=generate_listing_id(),
            property_type=dto.property_type,
            location=dto.location,
            price=dto.price,
            features=dto.features,
            description=dto.description,
            image_url=await self._resolve_image_url(dto, image),
            broker_id=dto.broker_id,
            commission=calculate_commission(dto.price),
        )

        self._listings.add(listing)
        await self._unit_of_work.commit()
        self._cache.invalidate()

        logger.info(
            "Listing created",
            listing_id=listing.id,
            broker_id=listing.broker_id,
            property_type=listing.property_type.value,
            price=str(listing.price),
            commission=str(listing.commission)
        )
        return WriteResult(WriteOutcome.APPLIED, listing.id)

    async def update(self, dto: PropertyListingDto, image: Optional[ImageUpload] = None) -> WriteResult:
        """Overwrite every mutable field and recompute commission; unknown id is a no-op."""
        if not dto.id:
            logger.info("Listing update skipped: no id supplied")
            return WriteResult(WriteOutcome.NO_OP)

        listing = await self._listings.get_by_id(dto.id)
        if listing is None:
            logger.info("Listing update skipped: listing not found", listing_id=dto.id)
            return WriteResult(WriteOutcome.NO_OP, dto.id)

        listing.property_type = dto.property_type
        listing.location = dto.location
        listing.price = dto.price
        listing.features = dto.features
        listing.description = dto.description
        listing.image_url = await self._resolve_image_url(dto, image)
        listing.broker_id = dto.broker_id
        listing.commission = calculate_commission(dto.price)

        self._listings.update(listing)
        await self._unit_of_work.commit()
        self._cache.invalidate()

        logger.info(
            "Listing updated",
            listing_id=listing.id,
            broker_id=listing.broker_id,
            price=str(listing.price),
            commission=str(listing.commission)
        )
        return WriteResult(WriteOutcome.APPLIED, listing.id)

    async def delete(self, listing_id: str) -> WriteResult:
        """Remove a listing; unknown id is a no-op."""
        listing = await self._listings.get_by_id(listing_id)
        if listing is None:
            logger.info("Listing delete skipped: listing not found", listing_id=listing_id)
            return WriteResult(WriteOutcome.NO_OP, listing_id)

        self._listings.delete(listing)
        await self._unit_of_work.commit()
        self._cache.invalidate()

        logger.info("Listing deleted", listing_id=listing_id, broker_id=listing.broker_id)
        return WriteResult(WriteOutcome.APPLIED, listing_id)

    async def search(
        self,
        location: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        property_type: Optional[Union[PropertyType, str]] = None,
    ) -> list[PropertyListingDto]:
        """
        Filter the cached listing set.

        Filters apply conjunctively: location (case-insensitive substring,
        ignored when blank), property type (exact), price >= min_price,
        price <= max_price. Any filter left as None is skipped.
        """
        results = await self.get_all()

        if location is not None and location.strip():
            needle = location.casefold()
            results = [listing for listing in results if needle in listing.location.casefold()]

        if property_type is not None:
            wanted = PropertyType(property_type)
            results = [listing for listing in results if listing.property_type is wanted]

        if min_price is not None:
            results = [listing for listing in results if listing.price >= min_price]

        if max_price is not None:
            results = [listing for listing in results if listing.price <= max_price]

        logger.debug(
            "Listing search completed",
            location=location,
            min_price=str(min_price) if min_price is not None else None,
            max_price=str(max_price) if max_price is not None else None,
            property_type=PropertyType(property_type).value if property_type is not None else None,
            result_count=len(results)
        )
        return results
