# services/favorites.py
import logging
import uuid
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from db import crud
from models import models as db_models
from schemas.favorite_schemas import FavoriteCreate
from services.errors import ConflictError, InvalidReferenceError, NotFoundError, ValidationError
from services.photo_source import normalize_external_id

logger = logging.getLogger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields: externalId and url."
DUPLICATE_MESSAGE = "You have already favorited this image."
NOT_FOUND_MESSAGE = "Image not found or unauthorized to delete."
INVALID_ID_MESSAGE = "Invalid image ID format."


def list_favorites(db: Session, user_id: uuid.UUID) -> List[db_models.SavedImage]:
    return crud.get_favorites_by_user(db, user_id=user_id)


def create_favorite(db: Session, user_id: uuid.UUID, data: FavoriteCreate) -> db_models.SavedImage:
    """
    Save a favorite for `user_id`.

    Raises:
        ValidationError: externalId or url missing.
        ConflictError: the user already saved this external id.
    """
    url = (data.url or "").strip()
    if data.external_id in (None, "") or not url:
        raise ValidationError(MISSING_FIELDS_MESSAGE)
    external_id = normalize_external_id(data.external_id)

    if crud.get_favorite_by_external_id(db, user_id=user_id, external_id=external_id):
        raise ConflictError(DUPLICATE_MESSAGE)

    try:
        favorite = crud.create_favorite(
            db,
            user_id=user_id,
            external_id=external_id,
            url=url,
            photographer_name=data.photographer_name,
            source=data.source,
        )
    except IntegrityError:
        # Lost a race with an identical request; the unique index is authoritative.
        db.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)

    logger.info(f"User {user_id} favorited photo {external_id}.")
    return favorite


def remove_favorite(db: Session, user_id: uuid.UUID, favorite_id: str) -> None:
    """
    Delete one of the user's favorites.

    A favorite owned by someone else is reported exactly like a missing one.
    """
    try:
        parsed_id = uuid.UUID(str(favorite_id))
    except ValueError:
        raise InvalidReferenceError(INVALID_ID_MESSAGE)

    favorite = crud.get_user_favorite(db, favorite_id=parsed_id, user_id=user_id)
    if favorite is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)

    crud.delete_favorite(db, favorite)
    logger.info(f"User {user_id} removed favorite {parsed_id}.")
