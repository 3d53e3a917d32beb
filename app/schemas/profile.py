from pydantic import BaseModel, ConfigDict
from typing import Optional


class ProfileUpdate(BaseModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileResponse(ProfileUpdate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
