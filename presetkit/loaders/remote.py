"""Fetch an external preset catalog over HTTP."""

import logging
from typing import Optional

import httpx

from presetkit.schemas.preset_schema import Catalog

logger = logging.getLogger(__name__)


async def fetch_catalog(
    url: str,
    client: Optional[httpx.AsyncClient] = None,
    timeout: Optional[float] = None,
) -> Catalog:
    """GET `url` and validate the JSON body as a Catalog.

    Raises httpx.HTTPError on transport or status failures, ValueError if the
    body is not JSON, and pydantic.ValidationError if it is not a catalog.
    """
    if client is None:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
            return await fetch_catalog(url, client=owned)

    logger.info(f"Fetching external catalog: {url}")
    response = await client.get(url)
    response.raise_for_status()
    return Catalog.model_validate(response.json())
