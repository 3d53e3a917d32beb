from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional


class BookingEmailDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: str = Field(alias="bookingId")
    turf_name: str = Field(alias="turfName")
    date: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    total_price: float = Field(alias="totalPrice")


class BookingEmailRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    type: Literal["confirmation", "cancellation"]
    booking_details: BookingEmailDetails = Field(alias="bookingDetails")


class BookingEmailResponse(BaseModel):
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
