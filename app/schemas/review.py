from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import List, Optional
from app.utils.validation_helpers import validate_rating


class ReviewCreate(BaseModel):
    rating: int
    comment: str = Field(min_length=1)

    @field_validator("rating")
    @classmethod
    def check_rating(cls, value):
        return validate_rating(value)


class ReplyCreate(BaseModel):
    comment: str = Field(min_length=1)


class ReplyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    review_id: str
    user_id: str
    comment: str
    created_at: Optional[datetime] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    turf_id: str
    user_id: str
    rating: int
    comment: str
    created_at: Optional[datetime] = None
    replies: List[ReplyResponse] = Field(default_factory=list)
