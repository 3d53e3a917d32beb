from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from app.schemas.booking import BookingResponse


class TurfBase(BaseModel):
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(ge=0)
    capacity: int = Field(gt=0)
    features: List[str] = Field(default_factory=list)


class TurfCreate(TurfBase):
    pass


class TurfUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    capacity: Optional[int] = Field(default=None, gt=0)
    features: Optional[List[str]] = None


class TurfResponse(TurfBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    rating: float = 0
    reviews: int = 0
    owner_id: Optional[str] = None


class TurfStatsResponse(BaseModel):
    total_bookings: int
    active_bookings: int
    total_revenue: float
    recent_bookings: List[BookingResponse]
