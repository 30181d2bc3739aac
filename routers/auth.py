from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
import logging

from db.database import get_db
from db import crud
from models.models import User
from schemas.user_schemas import UserCreate, UserSchema, Token
from auth_utils import verify_password, create_access_token, get_current_user, token_claims_for
from rate_limiter import limiter, get_dynamic_rate_limit

# Initialize logger for this module
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    responses={404: {"description": "Not found"}},
)

@router.post("/register", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_dynamic_rate_limit)
def register_user(
    request: Request,
    user: UserCreate,
    db: Session = Depends(get_db)
):
    """
    Registers a new user. Email is stored lowercased and must be unique.
    """
    logger.info(f"Registration attempt for email: {user.email}")
    if crud.get_user_by_email(db, email=user.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    # Create user (hashing is done within crud.create_user)
    created_user = crud.create_user(db=db, user=user)
    logger.info(f"User registered: {created_user.id}")
    return created_user

@router.post("/login", response_model=Token)
@limiter.limit(get_dynamic_rate_limit)
async def login_for_access_token(request: Request, form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = crud.get_user_by_email(db, email=form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        logger.warning("Failed login attempt.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data=token_claims_for(user))
    return {"access_token": access_token, "token_type": "bearer"}

@router.get("/verify", response_model=UserSchema)
async def verify_token(current_user: User = Depends(get_current_user)):
    """
    Returns the user the bearer token belongs to; 401 if the token is not valid.
    """
    return current_user
