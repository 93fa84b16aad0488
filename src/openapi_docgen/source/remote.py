"""Fetch the endpoint list from the Apifox HTTP API export."""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from openapi_docgen.errors import IngestionError
from openapi_docgen.source.models import Endpoint, SourceRoot

logger = logging.getLogger(__name__)


async def fetch_endpoints(
    url: str,
    headers: dict[str, str] | None = None,
    *,
    timeout: float = 30.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Endpoint]:
    """Download and validate the endpoint list.

    Any failure raises IngestionError: generating from a partial or
    misshapen list would silently drop operations.
    """
    logger.info("Fetching endpoints from %s", url)
    async with httpx.AsyncClient(timeout=timeout, transport=transport) as client:
        try:
            response = await client.get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise IngestionError(f"endpoint source request failed: {exc}", url=url) from exc

    if not response.is_success:
        raise IngestionError(
            f"endpoint source fetch failed: {response.status_code}",
            url=url,
            status=response.status_code,
        )

    try:
        payload = response.json()
    except ValueError as exc:
        raise IngestionError("endpoint source did not return JSON", url=url, status=response.status_code) from exc

    endpoints = parse_source_root(payload, url=url)
    logger.info("Fetched %d endpoints", len(endpoints))
    return endpoints


def parse_source_root(payload: Any, *, url: str | None = None) -> list[Endpoint]:
    """Check the ``{success: true, data: [...]}`` shape and validate each endpoint."""
    if (
        not isinstance(payload, dict)
        or payload.get("success") is not True
        or not isinstance(payload.get("data"), list)
    ):
        raise IngestionError("invalid endpoint source: expected { success: true, data: [] }", url=url)

    try:
        root = SourceRoot.model_validate(payload)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise IngestionError(f"invalid endpoint record at {location}: {first['msg']}", url=url) from exc
    return root.data
