from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional
from app.utils.validation_helpers import validate_rating


class TestimonialCreate(BaseModel):
    name: str = Field(min_length=1)
    title: Optional[str] = None
    text: str = Field(min_length=1)
    rating: int
    image: Optional[str] = None

    @field_validator("rating")
    @classmethod
    def check_rating(cls, value):
        return validate_rating(value)


class TestimonialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    title: Optional[str] = None
    text: str
    rating: int
    image: Optional[str] = None
    created_at: Optional[datetime] = None
