"""
HTTP operation utilities

Thin JSON request helpers shared by the listings and metadata clients.
No retries are performed: a failed call is final for that invocation.
"""
import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)


class UpstreamUnavailable(RuntimeError):
    """Raised when an upstream service is unreachable, answers non-2xx or returns bad JSON"""

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


async def get_json(
    client: httpx.AsyncClient,
    path: str,
    params: dict[str, Any] | None = None,
) -> Any:
    """
    Issue a GET request and decode the JSON body

    Args:
        client: HTTP client (base URL and timeout already configured)
        path: Request path relative to the client's base URL
        params: Optional query parameters

    Returns:
        Decoded JSON payload

    Raises:
        UpstreamUnavailable: On transport errors, non-2xx status or invalid JSON
    """
    try:
        response = await client.get(path, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise UpstreamUnavailable(f"HTTP {status} from {path}", status_code=status) from e
    except httpx.HTTPError as e:
        raise UpstreamUnavailable(f"Request to {path} failed: {type(e).__name__}: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamUnavailable(f"Invalid JSON from {path}") from e


async def get_status(client: httpx.AsyncClient, path: str) -> int:
    """
    Issue a GET request and return only its status code

    Raises:
        UpstreamUnavailable: If the request could not be completed
    """
    try:
        response = await client.get(path)
    except httpx.HTTPError as e:
        raise UpstreamUnavailable(f"Request to {path} failed: {type(e).__name__}: {e}") from e
    return response.status_code


def redact_params(params: dict[str, Any] | None) -> dict[str, Any]:
    """Copy of query parameters safe for logging (API keys masked)."""
    if not params:
        return {}
    return {key: ("***" if "key" in key.lower() else value) for key, value in params.items()}
