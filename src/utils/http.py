"""Helpers shared by the serverless request handlers."""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional


def json_response(status_code: int, payload: Any) -> dict:
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload)
    }


def query_params(request: dict) -> dict:
    return request.get("query", {}) or {}


def request_method(request: dict) -> str:
    return (request.get("method") or "GET").upper()


def parse_json_body(request: dict) -> dict:
    """Decode the request body; empty bodies read as {}. Raises ValueError on anything but a JSON object."""
    raw_body = request.get("body") or ""
    if isinstance(raw_body, dict):
        return raw_body
    if not raw_body.strip():
        return {}
    try:
        body = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Request body is not valid JSON: {e.msg}")
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def parse_decimal(params: dict, name: str) -> Optional[Decimal]:
    """Optional finite decimal parameter; blank reads as None."""
    raw = params.get(name)
    if raw in (None, ""):
        return None
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        raise ValueError(f"{name} must be a number")
    if not value.is_finite():
        raise ValueError(f"{name} must be a number")
    return value
