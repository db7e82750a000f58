"""Seed endpoint: loads sample listings and the default commission rules into empty tables.

Call once after provisioning, e.g. from a deploy hook. Safe to repeat.
"""

import asyncio

from src.services.listing_cache import get_listing_cache
from src.services.repository import UnitOfWork
from src.services.seeder import seed_database
from src.services.supabase_client import SupabaseStore
from src.utils.http import json_response, parse_json_body, query_params, request_method
from src.utils.logging import correlation_context, correlation_id_from_headers, get_structured_logger, setup_logging

setup_logging()
logger = get_structured_logger(__name__)


def build_unit_of_work() -> UnitOfWork:
    return UnitOfWork(SupabaseStore())


def handler(request):
    """POST with broker_id in the query or JSON body; the sample listings are owned by that broker."""
    correlation_id = correlation_id_from_headers(request.get("headers"))
    method = request_method(request)

    with correlation_context(correlation_id):
        if method != "POST":
            return json_response(405, {"error": f"Method {method} not allowed"})

        try:
            broker_id = query_params(request).get("broker_id") or parse_json_body(request).get("broker_id")
        except ValueError as e:
            return json_response(400, {"error": str(e)})
        if not broker_id:
            return json_response(400, {"error": "broker_id is required"})

        try:
            written = asyncio.run(seed_database(build_unit_of_work(), broker_id))
        except Exception as e:
            logger.error("Error seeding database", error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})

        if written:
            get_listing_cache().invalidate()

        return json_response(200, {"ok": True, "rows_written": written, "broker_id": broker_id})
