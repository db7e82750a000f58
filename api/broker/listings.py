"""Broker listings endpoint: every listing owned by ?broker_id=."""

import asyncio

from src.models.listing import to_listing_dto
from src.services.broker_service import BrokerService
from src.services.repository import UnitOfWork
from src.services.supabase_client import SupabaseStore
from src.utils.http import json_response, query_params
from src.utils.logging import correlation_context, correlation_id_from_headers, get_structured_logger, setup_logging

setup_logging()
logger = get_structured_logger(__name__)


def build_broker_service() -> BrokerService:
    return BrokerService(UnitOfWork(SupabaseStore()))


def handler(request):
    correlation_id = correlation_id_from_headers(request.get("headers"))
    broker_id = query_params(request).get("broker_id")

    with correlation_context(correlation_id):
        if not broker_id:
            return json_response(400, {"error": "broker_id is required"})

        try:
            service = build_broker_service()
            listings = asyncio.run(service.get_broker_listings(broker_id))
        except Exception as e:
            logger.error("Error listing broker properties", broker_id=broker_id, error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})

        return json_response(200, {
            "broker_id": broker_id,
            "count": len(listings),
            "listings": [to_listing_dto(listing).model_dump(mode="json") for listing in listings]
        })
