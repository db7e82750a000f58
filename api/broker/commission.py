"""Broker commission endpoint."""

import asyncio

from src.services.broker_service import BrokerService
from src.services.repository import UnitOfWork
from src.services.supabase_client import SupabaseStore
from src.utils.errors import CommissionRuleError
from src.utils.http import json_response, parse_decimal, query_params
from src.utils.logging import correlation_context, correlation_id_from_headers, get_structured_logger, setup_logging

setup_logging()
logger = get_structured_logger(__name__)


def build_broker_service() -> BrokerService:
    return BrokerService(UnitOfWork(SupabaseStore()))


def handler(request):
    """
    Commission queries.

    ?price=<amount> returns the rule-table commission for a price;
    ?broker_id=<id> returns the broker's total stored commission.
    """
    correlation_id = correlation_id_from_headers(request.get("headers"))
    params = query_params(request)

    with correlation_context(correlation_id):
        broker_id = params.get("broker_id")
        try:
            price = parse_decimal(params, "price")
        except ValueError as e:
            return json_response(400, {"error": str(e)})

        if price is not None and price < 0:
            return json_response(400, {"error": "price must not be negative"})
        if price is None and not broker_id:
            return json_response(400, {"error": "price or broker_id is required"})

        try:
            service = build_broker_service()
            if price is not None:
                commission = asyncio.run(service.calculate_commission(price))
                return json_response(200, {"price": str(price), "commission": str(commission)})

            total = asyncio.run(service.get_total_commission(broker_id))
            return json_response(200, {"broker_id": broker_id, "total_commission": str(total)})

        except CommissionRuleError as e:
            logger.error("Commission rule table rejected", issues=e.issues)
            return json_response(500, {"error": str(e)})
        except Exception as e:
            logger.error("Error computing commission", error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})
