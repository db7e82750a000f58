"""Test helper functions."""

import json
from typing import Any, Dict


def create_request(
    method: str = "GET",
    path: str = "/api/listings/search",
    query: Dict[str, Any] = None,
    headers: Dict[str, str] = None,
    body: Dict[str, Any] = None
) -> Dict[str, Any]:
    """Create a serverless request object for testing."""
    if headers is None:
        headers = {"content-type": "application/json"}

    return {
        "method": method,
        "path": path,
        "headers": headers,
        "body": json.dumps(body) if body is not None else "",
        "query": query or {}
    }
