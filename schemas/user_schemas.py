# schemas/user_schemas.py
import re
import uuid
from datetime import datetime
from pydantic import BaseModel, constr, validator

from models.models import MIN_NAME_LENGTH

MIN_PASSWORD_LENGTH = 8
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")

class UserBase(BaseModel):
    email: str

    @validator('email', pre=True)
    def normalize_email(cls, v):
        if not isinstance(v, str):
            raise ValueError('Provide a valid email address.')
        v = v.strip().lower()
        if not EMAIL_PATTERN.match(v):
            raise ValueError('Provide a valid email address.')
        return v

class UserCreate(UserBase):
    name: constr(strip_whitespace=True, min_length=MIN_NAME_LENGTH)
    password: constr(min_length=MIN_PASSWORD_LENGTH)

    @validator('password')
    def password_strength(cls, v):
        if not re.search(r"[A-Z]", v):
            raise ValueError('Password must contain an uppercase letter')
        if not re.search(r"[a-z]", v):
            raise ValueError('Password must contain a lowercase letter')
        if not re.search(r"\d", v):
            raise ValueError('Password must contain a digit')
        return v

class UserSchema(UserBase):
    id: uuid.UUID
    name: str
    created_at: datetime

    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
