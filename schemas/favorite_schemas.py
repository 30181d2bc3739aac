# schemas/favorite_schemas.py
import uuid
from datetime import datetime
from typing import Optional, Union
from pydantic import AliasChoices, BaseModel, Field, StrictInt, StrictStr

class FavoriteCreate(BaseModel):
    # Required-ness is checked by the favorites service so a missing field is a 400, not a 422.
    # Strict so JSON true or 4.5 is rejected instead of coerced to an id.
    external_id: Optional[Union[StrictStr, StrictInt]] = Field(
        default=None, validation_alias=AliasChoices("externalId", "external_id")
    )
    url: Optional[str] = None
    photographer_name: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("photographerName", "photographer_name")
    )
    source: Optional[str] = None

class FavoriteSchema(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID = Field(serialization_alias="user")
    external_id: str = Field(serialization_alias="externalId")
    url: str
    photographer_name: Optional[str] = Field(default=None, serialization_alias="photographerName")
    source: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")

    class Config:
        from_attributes = True
