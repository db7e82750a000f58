"""Listing CRUD endpoint.

GET     ?id=<id> for one listing, otherwise every listing (served from cache)
POST    create from a JSON submission, with an optional base64 image
PUT     overwrite the listing named by ?id= or the body's "id"
DELETE  ?id=<id>
"""

import asyncio
import base64
import binascii
from typing import Optional

from src.services.file_storage import ImageUpload, LocalFileStorage
from src.services.listing_cache import get_listing_cache
from src.services.listing_service import ListingService, WriteResult
from src.services.listing_validator import validate_listing_submission
from src.services.repository import UnitOfWork
from src.services.supabase_client import SupabaseStore
from src.utils.errors import ListingValidationError
from src.utils.http import json_response, parse_json_body, query_params, request_method
from src.utils.logging import correlation_context, correlation_id_from_headers, get_structured_logger, setup_logging

setup_logging()
logger = get_structured_logger(__name__)


def build_listing_service() -> ListingService:
    """Listing service for one request, sharing the process-wide cache."""
    return ListingService(UnitOfWork(SupabaseStore()), get_listing_cache(), LocalFileStorage())


def _parse_image(body: dict) -> Optional[ImageUpload]:
    image = body.pop("image", None)
    if image is None:
        return None
    if not isinstance(image, dict) or not image.get("filename") or not isinstance(image.get("content_base64"), str):
        raise ValueError("image must carry filename and content_base64")
    try:
        content = base64.b64decode(image["content_base64"], validate=True)
    except (binascii.Error, ValueError):
        raise ValueError("image content_base64 is not valid base64")
    return ImageUpload(content=content, filename=image["filename"])


def _write_response(result: WriteResult, success_status: int = 200) -> dict:
    payload = {"id": result.listing_id, "outcome": result.outcome.value}
    if not result.applied:
        payload["error"] = "Listing not found"
        return json_response(404, payload)
    return json_response(success_status, payload)


def _get(service: ListingService, params: dict) -> dict:
    listing_id = params.get("id")
    if listing_id:
        listing = asyncio.run(service.get_by_id(listing_id))
        if listing is None:
            return json_response(404, {"id": listing_id, "error": "Listing not found"})
        return json_response(200, listing.model_dump(mode="json"))

    listings = asyncio.run(service.get_all())
    return json_response(200, {
        "count": len(listings),
        "listings": [listing.model_dump(mode="json") for listing in listings]
    })


def _save(service: ListingService, request: dict, params: dict, creating: bool) -> dict:
    body = parse_json_body(request)
    image = _parse_image(body)

    if creating:
        body.pop("id", None)
    else:
        body["id"] = params.get("id") or body.get("id")
        if not body["id"]:
            return json_response(400, {"error": "id is required"})

    dto = validate_listing_submission(body)

    if creating:
        return _write_response(asyncio.run(service.add(dto, image)), success_status=201)
    return _write_response(asyncio.run(service.update(dto, image)))


def _delete(service: ListingService, params: dict) -> dict:
    listing_id = params.get("id")
    if not listing_id:
        return json_response(400, {"error": "id is required"})
    return _write_response(asyncio.run(service.delete(listing_id)))


def handler(request):
    """Dispatch on the HTTP method."""
    correlation_id = correlation_id_from_headers(request.get("headers"))
    method = request_method(request)
    params = query_params(request)

    with correlation_context(correlation_id):
        if method not in ("GET", "POST", "PUT", "DELETE"):
            return json_response(405, {"error": f"Method {method} not allowed"})

        try:
            service = build_listing_service()
            if method == "GET":
                return _get(service, params)
            if method == "DELETE":
                return _delete(service, params)
            return _save(service, request, params, creating=method == "POST")

        except ListingValidationError as e:
            logger.info("Listing submission rejected", invalid_fields=[error["field"] for error in e.errors])
            return json_response(400, {"error": str(e), "errors": e.errors})
        except ValueError as e:
            return json_response(400, {"error": str(e)})
        except Exception as e:
            logger.error("Error handling listing request", method=method, error=str(e), exc_info=True)
            return json_response(500, {"error": str(e)})
