from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import date, datetime
from typing import List, Literal, Optional
from app.utils.overlap import add_hours
from app.utils.validation_helpers import validate_slot_time


class BookingBase(BaseModel):
    turf_id: str
    booking_date: date
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def check_slot_time(cls, value):
        return validate_slot_time(value)


class BookingCreate(BookingBase):
    # Either end_time or a whole number of hours from start_time
    end_time: Optional[str] = None
    duration: Optional[int] = Field(default=None, gt=0)
    use_points: bool = False
    # Computed by the client for display; the server recomputes it
    total_price: Optional[float] = None

    @model_validator(mode="after")
    def check_end(self):
        if self.end_time is None and self.duration is None:
            raise ValueError("Either end_time or duration is required")
        return self

    def resolved_end_time(self) -> str:
        return self.end_time or add_hours(self.start_time, self.duration)


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    turf_id: str
    user_id: str
    booking_date: date
    start_time: str
    end_time: str
    total_price: float
    status: Literal["confirmed", "cancelled", "pending"]
    created_at: Optional[datetime] = None


class BookingWithTurfResponse(BookingResponse):
    turf_name: Optional[str] = None
    can_cancel: bool = False


class BookingSubmissionResponse(BookingResponse):
    points_debited: int = 0
    warnings: List[str] = Field(default_factory=list)


class BookingCancellationResponse(BookingResponse):
    warnings: List[str] = Field(default_factory=list)


class BookedSlot(BaseModel):
    start_time: str
    end_time: str


class BookedSlotsResponse(BaseModel):
    turf_id: str
    booking_date: date
    booked_slots: List[BookedSlot]


class AvailableSlotsResponse(BaseModel):
    turf_id: str
    booking_date: date
    duration: int
    available_start_times: List[str]
