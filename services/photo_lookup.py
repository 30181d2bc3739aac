# services/photo_lookup.py
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from db import crud
from services.errors import NotFoundError, UpstreamError
from services.ingestion import ingest, photo_to_dict, transform_photo
from services.photo_source import PicsumClient, normalize_external_id

logger = logging.getLogger(__name__)

LOOKUP_ERROR_MESSAGE = "Error fetching photo"


async def get_photo(db: Session, source: PicsumClient, external_id: Any) -> Dict[str, Any]:
    """
    Return one photo, from the cache when present.

    On a miss only the source's default listing page is scanned, so ids
    beyond it report not found.
    """
    external_id = normalize_external_id(external_id)

    cached = crud.get_photo_by_external_id(db, external_id)
    if cached:
        return photo_to_dict(cached)

    try:
        listing = await source.list_photos()
        raw = next(
            (entry for entry in listing if isinstance(entry, dict) and str(entry.get("id")) == external_id),
            None,
        )
        if raw is None:
            logger.info(f"Photo {external_id} not found in cache or first listing page.")
            raise NotFoundError("Photo not found")
        photo = transform_photo(raw)
    except UpstreamError as e:
        raise UpstreamError(LOOKUP_ERROR_MESSAGE, error=e.error)

    # Persisted before responding, still best-effort.
    ingest(db, photo)
    return photo
