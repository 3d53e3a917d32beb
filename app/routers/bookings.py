from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from datetime import date
from sqlalchemy.orm import Session
from app.db import get_db
from app.models.booking import Booking
from app.routers.turfs import get_turf_or_404
from app.schemas.booking import (
    AvailableSlotsResponse,
    BookedSlotsResponse,
    BookingCancellationResponse,
    BookingCreate,
    BookingResponse,
    BookingSubmissionResponse,
    BookingWithTurfResponse,
)
from app.utils import scheduler
from app.utils.auth import SessionContext, get_current_user
from app.utils.overlap import free_start_times
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


def conflict_detail(error: scheduler.SlotConflict) -> dict:
    """409 body carrying the refreshed availability so the caller can re-pick."""
    return {
        "message": str(error),
        "booked_slots": [
            {"start_time": start, "end_time": end} for start, end in error.booked_slots
        ],
    }


def get_booking_or_404(db: Session, booking_id: str) -> Booking:
    booking = db.query(Booking).filter(Booking.id == booking_id).first()
    if not booking:
        logger.error(f"Booking not found: {booking_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


def manages_turf(booking: Booking, current_user: SessionContext) -> bool:
    return current_user.is_admin or booking.turf.owner_id == current_user.id


@router.post(
    "/",
    response_model=BookingSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a turf slot",
    description="Reserve a time slot on a turf. Requires authentication."
)
def create_booking(
    booking: BookingCreate,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    """
    Reserve a time slot on a turf.
    Requires authentication.

    - **turf_id**: ID of the turf to book.
    - **booking_date**: Date of the booking (e.g., 2024-06-01).
    - **start_time** / **end_time**: Slot bounds as HH:MM.
    - **use_points**: Spend loyalty points against the price.

    Returns the confirmed booking, the points debited and any non-fatal warnings.
    A slot that is already taken answers 409 with the current booked slots.
    """
    logger.debug(f"Creating booking for user: {current_user.id}, turf_id: {booking.turf_id}")

    turf = get_turf_or_404(db, booking.turf_id)
    end_time = booking.resolved_end_time()

    try:
        result = scheduler.submit_booking(
            db,
            turf,
            booking.booking_date,
            booking.start_time,
            end_time,
            current_user,
            use_points=booking.use_points,
        )
    except scheduler.InvalidBookingTime as e:
        logger.error(f"Invalid slot {booking.start_time}-{end_time}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except scheduler.SlotConflict as e:
        logger.error(f"Slot conflict for turf_id: {turf.id}, {booking.booking_date} {booking.start_time}-{end_time}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=conflict_detail(e))

    response = BookingResponse.model_validate(result.booking).model_dump()
    return BookingSubmissionResponse(
        **response, points_debited=result.points_debited, warnings=result.warnings
    )


@router.get(
    "/mine",
    response_model=List[BookingWithTurfResponse],
    summary="List my bookings",
)
def get_my_bookings(
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    """
    Retrieve the caller's bookings, newest date first, with the turf name and
    whether each one can still be cancelled.
    """
    bookings = (
        db.query(Booking)
        .filter(Booking.user_id == current_user.id)
        .order_by(Booking.booking_date.desc(), Booking.start_time.desc())
        .all()
    )
    logger.debug(f"Retrieved {len(bookings)} bookings for user {current_user.id}")
    return [
        BookingWithTurfResponse(
            **BookingResponse.model_validate(b).model_dump(),
            turf_name=b.turf.name,
            can_cancel=scheduler.can_cancel(b),
        )
        for b in bookings
    ]


@router.get(
    "/booked_slots/",
    response_model=BookedSlotsResponse,
    summary="List booked slots",
    description="Confirmed time slots of a turf on a date."
)
def get_booked_slots(
    turf_id: str,
    date: date,
    db: Session = Depends(get_db),
):
    get_turf_or_404(db, turf_id)
    booked = scheduler.fetch_confirmed_slots(db, turf_id, date)
    return BookedSlotsResponse(
        turf_id=turf_id,
        booking_date=date,
        booked_slots=[{"start_time": start, "end_time": end} for start, end in booked],
    )


@router.get(
    "/available_slots/",
    response_model=AvailableSlotsResponse,
    summary="List available start times",
    description="Start times on a date where a turf is free for the given number of hours."
)
def get_available_slots(
    turf_id: str,
    date: date,
    duration: int = Query(1, description="Slot length in hours"),
    db: Session = Depends(get_db),
):
    """
    List available start times for a turf.

    - **turf_id**: ID of the turf to check availability for.
    - **date**: Date to check availability (e.g., 2024-06-01).
    - **duration**: Duration of the slot in hours (default: 1).
    """
    logger.debug(f"Fetching available slots for turf_id: {turf_id}, date: {date}, duration: {duration}h")

    if duration <= 0:
        logger.error(f"Invalid duration: {duration}, must be positive")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duration must be positive")

    get_turf_or_404(db, turf_id)
    booked = scheduler.fetch_confirmed_slots(db, turf_id, date)
    available = free_start_times(booked, duration)
    logger.debug(f"Found {len(available)} available start times for turf_id: {turf_id}")
    return AvailableSlotsResponse(
        turf_id=turf_id, booking_date=date, duration=duration, available_start_times=available
    )


@router.get(
    "/{booking_id}",
    response_model=BookingWithTurfResponse,
    summary="Get a booking by ID",
    description="Retrieve a booking. Restricted to its owner, the turf owner and administrators."
)
def get_booking(
    booking_id: str,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    booking = get_booking_or_404(db, booking_id)
    if booking.user_id != current_user.id and not manages_turf(booking, current_user):
        logger.error(f"User {current_user.id} not authorized to view booking {booking_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to view this booking")
    return BookingWithTurfResponse(
        **BookingResponse.model_validate(booking).model_dump(),
        turf_name=booking.turf.name,
        can_cancel=scheduler.can_cancel(booking),
    )


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingCancellationResponse,
    summary="Cancel a booking",
    description="Cancel a confirmed booking. Requires authentication and ownership."
)
def cancel_booking(
    booking_id: str,
    db: Session = Depends(get_db),
    current_user: SessionContext = Depends(get_current_user),
):
    """
    Cancel a confirmed booking.

    Booking owners may cancel up to the lead time before the slot starts.
    Turf owners and administrators may cancel at any time.
    """
    booking = get_booking_or_404(db, booking_id)
    is_manager = manages_turf(booking, current_user)
    if booking.user_id != current_user.id and not is_manager:
        logger.error(f"User {current_user.id} not authorized to cancel booking {booking_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to cancel this booking")

    try:
        warnings = scheduler.cancel_booking(db, booking, current_user, enforce_window=not is_manager)
    except scheduler.BookingNotCancellable as e:
        logger.error(f"Booking {booking_id} not cancellable: {e}")
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except scheduler.CancellationWindowClosed as e:
        logger.error(f"Cancellation window closed for booking {booking_id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return BookingCancellationResponse(
        **BookingResponse.model_validate(booking).model_dump(), warnings=warnings
    )
