# models/models.py
import uuid
from datetime import datetime
from sqlalchemy import Column, DateTime, Integer, String, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Constants for validation
MIN_NAME_LENGTH = 3
DEFAULT_FAVORITE_SOURCE = "External API"
DEFAULT_STORAGE_PATH = "placeholder/url"

class User(Base):
    __tablename__ = "users"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class Photo(Base):
    """Cached metadata for a photo fetched from the external photo source."""
    __tablename__ = "photos"
    id = Column(Integer, primary_key=True)
    external_id = Column(String, unique=True, index=True, nullable=False)
    width = Column(Integer, nullable=False)
    height = Column(Integer, nullable=False)
    url = Column(String, nullable=False)
    photographer = Column(String, nullable=False, index=True)
    photographer_url = Column(String, nullable=True)
    photographer_id = Column(String, nullable=True)
    avg_color = Column(String, nullable=True)
    src = Column(JSON, nullable=True)
    alt = Column(String, nullable=True)
    favorite_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class SavedImage(Base):
    """A user's favorite. Url and photographer are copied so display does not depend on the photo cache."""
    __tablename__ = "saved_images"
    __table_args__ = (
        UniqueConstraint("external_id", "user_id", name="uq_saved_image_external_id_user"),
    )
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    external_id = Column(String, nullable=False)
    url = Column(String, nullable=False)
    photographer_name = Column(String, nullable=True)
    source = Column(String, nullable=False, default=DEFAULT_FAVORITE_SOURCE)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class UploadedImage(Base):
    # Not written by any route yet; storage_path is a stub until real object storage exists.
    __tablename__ = "uploaded_images"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    storage_path = Column(String, nullable=False, default=DEFAULT_STORAGE_PATH)
    placeholder_url = Column(String, nullable=False)
    description = Column(String, nullable=True)
    file_size = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
