# schemas/photo_schemas.py
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

class PhotoSrc(BaseModel):
    original: str
    large2x: str
    large: str
    medium: str
    small: str
    portrait: str
    landscape: str
    tiny: str

class PhotoSchema(BaseModel):
    # `id` is the external source's id, not the cache row's primary key.
    id: str
    width: int
    height: int
    url: str
    photographer: str
    photographer_url: Optional[str] = None
    photographer_id: Optional[str] = None
    avg_color: Optional[str] = None
    src: Optional[PhotoSrc] = None
    alt: Optional[str] = None
    favorite_count: int = 0
    created_at: Optional[datetime] = None

class PhotoListResponse(BaseModel):
    page: int
    per_page: int
    total_results: int
    photos: List[PhotoSchema]
