from passlib.context import CryptContext

# bcrypt hashes for stored user passwords
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

# db.crud imports hash_password from here, so these imports stay below it.
import uuid
from datetime import datetime, timedelta
from typing import Optional
from jose import jwt, JWTError, ExpiredSignatureError
from fastapi import HTTPException, status, Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from db.database import get_db
from db import crud
from models.models import User

# Login takes the email in the OAuth2 `username` form field.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def token_claims_for(user: User) -> dict:
    """Claims carried by a user's access token. `user_id` is what requests are scoped by."""
    return {"sub": user.email, "user_id": str(user.id), "name": user.name}

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def decode_access_token(token: str) -> dict:
    """Returns the token's claims. Raises 401 for an expired or tampered token."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except JWTError:
        raise _unauthorized("Could not validate credentials")

def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    """
    Dependency resolving the bearer token to a stored user.

    The token must carry a `user_id` claim holding a UUID, and that user must
    still exist; every other case is a 401.
    """
    payload = decode_access_token(token)

    try:
        user_id = uuid.UUID(str(payload.get("user_id")))
    except ValueError:
        raise _unauthorized("Could not validate credentials - missing user identifier")

    user = crud.get_user_by_id(db, user_id=user_id)
    if user is None:
        # Deleted after the token was issued
        raise _unauthorized("User not found")
    return user
