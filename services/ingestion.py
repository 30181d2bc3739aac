# services/ingestion.py
"""
Turns external photo records into the internal photo shape and caches them.

Cache writes are best-effort: a failed write is logged and dropped, it never
fails the request that produced the photo.
"""
import logging
from typing import Any, Callable, Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from db import crud
from models import models as db_models
from services.errors import UpstreamError, ValidationError
from services.photo_source import FETCH_ERROR_MESSAGE, normalize_external_id

logger = logging.getLogger(__name__)

IMAGE_BASE_URL = "https://picsum.photos/id"
PLACEHOLDER_AVG_COLOR = "#1a1a1a"
DEFAULT_TAGS = "photography, nature, art, landscape"
CURATED_TAGS = "photography, art, nature"

# Fixed display renditions, (width, height). `original` uses the source dimensions.
SIZE_TEMPLATES = {
    "large2x": (1920, 1080),
    "large": (1280, 720),
    "medium": (800, 600),
    "small": (400, 300),
    "portrait": (600, 800),
    "landscape": (800, 600),
    "tiny": (200, 200),
}


def search_tags(query: str) -> str:
    return f"{query}, photography, professional"


def transform_photo(raw: Dict[str, Any], tags: Optional[str] = None) -> Dict[str, Any]:
    """
    Map a raw listing record to the photo shape returned by the API.

    Raises:
        UpstreamError: the record has no usable id or dimensions.
    """
    try:
        external_id = normalize_external_id(raw.get("id"))
        width = int(raw["width"])
        height = int(raw["height"])
    except (AttributeError, KeyError, TypeError, ValueError, ValidationError) as e:
        logger.error(f"Malformed listing entry {raw!r}: {e}")
        raise UpstreamError(FETCH_ERROR_MESSAGE, error="Malformed listing entry")
    base_url = f"{IMAGE_BASE_URL}/{external_id}"

    src = {"original": f"{base_url}/{width}/{height}"}
    for name, (w, h) in SIZE_TEMPLATES.items():
        src[name] = f"{base_url}/{w}/{h}"

    author_id = raw.get("author_id")
    return {
        "id": external_id,
        "width": width,
        "height": height,
        "url": raw.get("url") or src["original"],
        "photographer": raw.get("author") or "Unknown",
        "photographer_url": raw.get("url"),
        "photographer_id": str(author_id) if author_id not in (None, "") else "0",
        "avg_color": PLACEHOLDER_AVG_COLOR,
        "src": src,
        "alt": tags or DEFAULT_TAGS,
        "favorite_count": 0,
    }


def photo_to_dict(db_photo: db_models.Photo) -> Dict[str, Any]:
    """Serialize a cached photo in the same shape as `transform_photo`."""
    return {
        "id": db_photo.external_id,
        "width": db_photo.width,
        "height": db_photo.height,
        "url": db_photo.url,
        "photographer": db_photo.photographer,
        "photographer_url": db_photo.photographer_url,
        "photographer_id": db_photo.photographer_id,
        "avg_color": db_photo.avg_color,
        "src": db_photo.src,
        "alt": db_photo.alt,
        "favorite_count": db_photo.favorite_count or 0,
        "created_at": db_photo.created_at,
    }


def ingest(db: Session, photo_data: Dict[str, Any]) -> Optional[db_models.Photo]:
    """
    Find-or-create a cached photo by external id.

    An existing row is returned unchanged. When a concurrent writer inserts the
    same id first, the unique index rejects this insert and the winner's row is
    returned instead. Any other store failure is logged and None is returned.
    """
    external_id = photo_data["id"]
    try:
        existing = crud.get_photo_by_external_id(db, external_id)
        if existing:
            return existing
        return crud.create_photo(db, photo_data)
    except IntegrityError:
        db.rollback()
        logger.info(f"Photo {external_id} was cached by a concurrent request; using the existing row.")
        try:
            return crud.get_photo_by_external_id(db, external_id)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Error re-reading photo {external_id} after duplicate insert: {e}", exc_info=True)
            return None
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error saving photo {external_id} to DB: {e}", exc_info=True)
        return None


def cache_photos(session_factory: Callable[[], Session], photos: Iterable[Dict[str, Any]]) -> None:
    """
    Background task: ingest every photo in its own session.
    Runs after the response is sent; never raises.
    """
    try:
        db = session_factory()
    except Exception as e:
        logger.error(f"Could not open a session for photo caching: {e}", exc_info=True)
        return
    try:
        for photo in photos:
            ingest(db, photo)
    except Exception as e:
        logger.error(f"Unexpected error while caching photos: {e}", exc_info=True)
    finally:
        db.close()
