"""Listing search endpoint."""

import asyncio
from typing import Optional

from src.models.listing import PropertyType
from src.services.listing_cache import get_listing_cache
from src.services.listing_service import ListingService
from src.services.repository import UnitOfWork
from src.services.supabase_client import SupabaseStore
from src.utils.http import json_response, parse_decimal, query_params
from src.utils.logging import correlation_context, correlation_id_from_headers, get_structured_logger, setup_logging

setup_logging()
logger = get_structured_logger(__name__)


def _parse_property_type(params: dict) -> Optional[PropertyType]:
    raw = params.get("property_type")
    if not raw:
        return None
    try:
        return PropertyType(raw)
    except ValueError:
        allowed = ", ".join(member.value for member in PropertyType)
        raise ValueError(f"property_type must be one of: {allowed}")


def build_listing_service() -> ListingService:
    """Listing service for one request, sharing the process-wide cache."""
    return ListingService(UnitOfWork(SupabaseStore()), get_listing_cache())


def handler(request):
    """
    Search listings.

    Query params: location, min_price, max_price, property_type. All optional.
    """
    correlation_id = correlation_id_from_headers(request.get("headers"))

    with correlation_context(correlation_id):
        params = query_params(request)
        try:
            filters = {
                "location": params.get("location") or None,
                "min_price": parse_decimal(params, "min_price"),
                "max_price": parse_decimal(params, "max_price"),
                "property_type": _parse_property_type(params),
            }
        except ValueError as e:
            return json_response(400, {"error": str(e)})

        try:
            service = build_listing_service()
            listings = asyncio.run(service.search(**filters))
        except Exception as e:
            logger.error("Error searching listings", error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})

        return json_response(200, {
            "count": len(listings),
            "listings": [listing.model_dump(mode="json") for listing in listings]
        })
