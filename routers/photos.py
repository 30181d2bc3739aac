# routers/photos.py
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session, sessionmaker

from db.database import get_db, get_session_factory
from schemas.photo_schemas import PhotoListResponse, PhotoSchema
from services import search as search_service
from services.ingestion import cache_photos
from services.photo_lookup import get_photo
from services.photo_source import PicsumClient, get_photo_source

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/photos",
    tags=["photos"],
    responses={404: {"description": "Not found"}},
)


@router.get("/curated", response_model=PhotoListResponse)
async def list_curated_photos(
    background_tasks: BackgroundTasks,
    page: int = 1,
    per_page: int = search_service.DEFAULT_PER_PAGE,
    source: PicsumClient = Depends(get_photo_source),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    A page of the external listing. Photos are cached after the response is sent.
    """
    result = await search_service.list_curated(source, page=page, per_page=per_page)
    background_tasks.add_task(cache_photos, session_factory, result.photos)
    return result.as_dict()


@router.get("/search", response_model=PhotoListResponse)
async def search_photos(
    background_tasks: BackgroundTasks,
    query: Optional[str] = None,
    page: int = 1,
    per_page: int = search_service.DEFAULT_PER_PAGE,
    source: PicsumClient = Depends(get_photo_source),
    session_factory: sessionmaker = Depends(get_session_factory),
):
    """
    Keyword search against the external listing.
    """
    result = await search_service.search_remote(source, query or "", page=page, per_page=per_page)
    background_tasks.add_task(cache_photos, session_factory, result.photos)
    return result.as_dict()


@router.get("/local-search", response_model=PhotoListResponse)
async def search_cached_photos(
    search: Optional[str] = None,
    page: int = 1,
    per_page: int = search_service.DEFAULT_PER_PAGE,
    db: Session = Depends(get_db),
):
    """
    Search photos already cached, by photographer or description.
    """
    return search_service.search_local(db, search or "", page=page, per_page=per_page).as_dict()


@router.get("/{photo_id}", response_model=PhotoSchema)
async def read_photo(
    photo_id: str,
    db: Session = Depends(get_db),
    source: PicsumClient = Depends(get_photo_source),
):
    return await get_photo(db, source, photo_id)
