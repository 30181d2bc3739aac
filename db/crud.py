# db/crud.py

import uuid
from typing import Optional, List, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from models import models as db_models
from schemas import user_schemas

from auth_utils import hash_password

# --- User CRUD ---
def get_user_by_email(db: Session, email: str) -> Optional[db_models.User]:
    return db.query(db_models.User).filter(db_models.User.email == email.strip().lower()).first()

def get_user_by_id(db: Session, user_id: uuid.UUID) -> Optional[db_models.User]:
    return db.query(db_models.User).filter(db_models.User.id == user_id).first()

def create_user(db: Session, user: user_schemas.UserCreate) -> db_models.User:
    db_user = db_models.User(
        name=user.name,
        email=user.email,
        hashed_password=hash_password(user.password),
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user

# --- Photo cache CRUD ---
def get_photo_by_external_id(db: Session, external_id: str) -> Optional[db_models.Photo]:
    return db.query(db_models.Photo).filter(db_models.Photo.external_id == external_id).first()

def count_photos(db: Session) -> int:
    return db.query(db_models.Photo).count()

def create_photo(db: Session, photo_data: dict) -> db_models.Photo:
    """Insert a photo row. Raises IntegrityError if the external id is already cached."""
    db_photo = db_models.Photo(
        external_id=photo_data["id"],
        width=photo_data["width"],
        height=photo_data["height"],
        url=photo_data["url"],
        photographer=photo_data["photographer"],
        photographer_url=photo_data.get("photographer_url"),
        photographer_id=photo_data.get("photographer_id") or "0",
        avg_color=photo_data.get("avg_color"),
        src=photo_data.get("src"),
        alt=photo_data.get("alt"),
    )
    db.add(db_photo)
    db.commit()
    db.refresh(db_photo)
    return db_photo

def _photo_search_filter(search_term: str):
    # Wildcards in the term are matched literally.
    escaped = search_term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return or_(
        db_models.Photo.photographer.ilike(pattern, escape="\\"),
        db_models.Photo.alt.ilike(pattern, escape="\\"),
    )

def search_photos(db: Session, search_term: str, skip: int = 0, limit: int = 30) -> Tuple[List[db_models.Photo], int]:
    """Case-insensitive substring search over photographer and alt text, newest first."""
    query = db.query(db_models.Photo).filter(_photo_search_filter(search_term))
    total = query.count()
    photos = (
        query.order_by(db_models.Photo.created_at.desc(), db_models.Photo.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )
    return photos, total

# --- Favorite (SavedImage) CRUD ---
def get_favorites_by_user(db: Session, user_id: uuid.UUID) -> List[db_models.SavedImage]:
    return (
        db.query(db_models.SavedImage)
        .filter(db_models.SavedImage.user_id == user_id)
        .order_by(db_models.SavedImage.created_at.asc())
        .all()
    )

def get_favorite_by_external_id(db: Session, user_id: uuid.UUID, external_id: str) -> Optional[db_models.SavedImage]:
    return (
        db.query(db_models.SavedImage)
        .filter(db_models.SavedImage.user_id == user_id, db_models.SavedImage.external_id == external_id)
        .first()
    )

def get_user_favorite(db: Session, favorite_id: uuid.UUID, user_id: uuid.UUID) -> Optional[db_models.SavedImage]:
    return (
        db.query(db_models.SavedImage)
        .filter(db_models.SavedImage.id == favorite_id, db_models.SavedImage.user_id == user_id)
        .first()
    )

def create_favorite(
    db: Session,
    user_id: uuid.UUID,
    external_id: str,
    url: str,
    photographer_name: Optional[str] = None,
    source: Optional[str] = None,
) -> db_models.SavedImage:
    """Insert a favorite. Raises IntegrityError if the user already saved this external id."""
    db_favorite = db_models.SavedImage(
        user_id=user_id,
        external_id=external_id,
        url=url,
        photographer_name=photographer_name,
        source=source or db_models.DEFAULT_FAVORITE_SOURCE,
    )
    db.add(db_favorite)
    db.commit()
    db.refresh(db_favorite)
    return db_favorite

def delete_favorite(db: Session, db_favorite: db_models.SavedImage) -> None:
    db.delete(db_favorite)
    db.commit()
