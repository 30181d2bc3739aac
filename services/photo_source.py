# services/photo_source.py
"""
Client for the external photo listing API (Picsum).

The listing endpoint returns records shaped like
``{"id": "10", "author": "Paul Jarvis", "width": 2500, "height": 1667,
"url": "https://unsplash.com/photos/...", "download_url": "..."}``.
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from config import PHOTO_SOURCE_BASE_URL, PHOTO_SOURCE_TIMEOUT_SECONDS
from services.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100
FETCH_ERROR_MESSAGE = "Error fetching photos from Picsum API."


def normalize_external_id(value: Any) -> str:
    """
    Coerce an external photo id (the source uses strings, other sources use
    numbers) to its canonical string form so both representations address
    the same record.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError("External photo ID is required.")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    raise ValidationError("External photo ID must be a non-empty string or number.")


class PicsumClient:
    def __init__(
        self,
        base_url: str = PHOTO_SOURCE_BASE_URL,
        timeout: float = PHOTO_SOURCE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def list_photos(self, page: Optional[int] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """
        Fetch one page of the listing. With no arguments the source's default
        page is returned.

        Raises:
            UpstreamError: on transport failures, non-2xx responses or a body
                that is not a JSON list.
        """
        params = {}
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = min(limit, MAX_PAGE_SIZE)

        url = f"{self.base_url}/list"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Photo source request to {url} failed: {e}")
            raise UpstreamError(FETCH_ERROR_MESSAGE, error=str(e))
        except ValueError as e:
            logger.error(f"Photo source returned invalid JSON from {url}: {e}")
            raise UpstreamError(FETCH_ERROR_MESSAGE, error="Invalid JSON response")

        if not isinstance(data, list):
            raise UpstreamError(FETCH_ERROR_MESSAGE, error="Unexpected response shape")

        logger.debug(f"Fetched {len(data)} photos from {url} with params {params}")
        return data


def get_photo_source() -> PicsumClient:
    """Dependency providing the external photo source client."""
    return PicsumClient()
