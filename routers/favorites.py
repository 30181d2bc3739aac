# routers/favorites.py
from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from auth_utils import get_current_user
from db.database import get_db
from models.models import User
from rate_limiter import limiter, get_dynamic_rate_limit
from schemas.favorite_schemas import FavoriteCreate, FavoriteSchema
from services import favorites as favorites_service

router = APIRouter(
    prefix="/api/favorites",
    tags=["favorites"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=List[FavoriteSchema])
@limiter.limit(get_dynamic_rate_limit)
async def list_favorites(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    List all favorites of the current user.
    """
    return favorites_service.list_favorites(db, user_id=current_user.id)


@router.post("", response_model=FavoriteSchema, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_dynamic_rate_limit)
async def create_favorite(
    request: Request,
    favorite_data: FavoriteCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Save a photo as a favorite of the current user.
    """
    return favorites_service.create_favorite(db, user_id=current_user.id, data=favorite_data)


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit(get_dynamic_rate_limit)
async def delete_favorite(
    request: Request,
    image_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Remove one of the current user's favorites.
    """
    favorites_service.remove_favorite(db, user_id=current_user.id, favorite_id=image_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
