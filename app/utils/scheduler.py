"""
Booking lifecycle: submission and cancellation.

The overlap check run before inserting is advisory. The authoritative guard
is the ``unique_booking_slot_confirmed`` index on (turf_id, booking_date,
start_time) for confirmed rows; an insert rejected by it means another
request won the race for the slot.
"""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from app import config
from app.models.booking import Booking
from app.models.points import UserPoints
from app.models.turf import Turf
from app.utils import notifier
from app.utils.auth import SessionContext
from app.utils.overlap import duration_hours, is_slot_free, to_minutes

logger = logging.getLogger(__name__)

UNIQUE_SLOT_INDEX = "unique_booking_slot_confirmed"
UNIQUE_SLOT_COLUMNS = "bookings.turf_id, bookings.booking_date, bookings.start_time"


class BookingError(Exception):
    """Base class for booking rule violations."""


class InvalidBookingTime(BookingError):
    pass


class SlotConflict(BookingError):
    """The requested slot is held by a confirmed booking."""

    def __init__(self, message: str, booked_slots: List[Tuple[str, str]]):
        super().__init__(message)
        self.booked_slots = booked_slots


class SlotUnavailable(SlotConflict):
    """Conflict detected by the overlap check, before any write."""


class SlotTaken(SlotConflict):
    """Conflict detected by the store at insert time: the race was lost."""


class BookingNotCancellable(BookingError):
    pass


class CancellationWindowClosed(BookingError):
    pass


@dataclass
class SubmissionResult:
    booking: Booking
    points_debited: int = 0
    warnings: List[str] = field(default_factory=list)


def fetch_confirmed_slots(db: Session, turf_id: str, booking_date: date) -> List[Tuple[str, str]]:
    rows = (
        db.query(Booking.start_time, Booking.end_time)
        .filter(
            Booking.turf_id == turf_id,
            Booking.booking_date == booking_date,
            Booking.status == "confirmed",
        )
        .order_by(Booking.start_time)
        .all()
    )
    return [(row.start_time, row.end_time) for row in rows]


def compute_price(turf: Turf, start_time: str, end_time: str) -> float:
    return round(duration_hours(start_time, end_time) * turf.price, 2)


def _is_slot_violation(error: IntegrityError) -> bool:
    # postgres names the index, sqlite lists its columns
    message = str(error.orig)
    return UNIQUE_SLOT_INDEX in message or UNIQUE_SLOT_COLUMNS in message


def debit_points(db: Session, user_id: str, amount: float) -> int:
    """Take up to ``amount`` points off the user's balance; returns the points taken.

    The caller commits.
    """
    balance = db.query(UserPoints).filter(UserPoints.user_id == user_id).first()
    if balance is None or balance.points <= 0:
        return 0
    debit = min(balance.points, int(amount))
    balance.points -= debit
    return debit


def submit_booking(
    db: Session,
    turf: Turf,
    booking_date: date,
    start_time: str,
    end_time: str,
    user: SessionContext,
    use_points: bool = False,
) -> SubmissionResult:
    try:
        start_minutes, end_minutes = to_minutes(start_time), to_minutes(end_time)
    except ValueError as e:
        raise InvalidBookingTime(str(e))
    if end_minutes <= start_minutes:
        raise InvalidBookingTime("End time must be after start time")

    # Re-read from the store; the caller's view of availability may be stale
    booked = fetch_confirmed_slots(db, turf.id, booking_date)
    if not is_slot_free(start_time, end_time, booked):
        raise SlotUnavailable("Turf is already booked for this time slot", booked)

    total_price = compute_price(turf, start_time, end_time)
    booking = Booking(
        turf_id=turf.id,
        user_id=user.id,
        user_email=user.email,
        booking_date=booking_date,
        start_time=start_time,
        end_time=end_time,
        total_price=total_price,
        status="confirmed",
    )
    db.add(booking)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not _is_slot_violation(e):
            raise
        logger.error(f"Lost booking race for turf {turf.id} on {booking_date} at {start_time}")
        raise SlotTaken(
            "This slot was just booked by someone else. Please choose another slot.",
            fetch_confirmed_slots(db, turf.id, booking_date),
        )
    db.refresh(booking)
    logger.debug(f"Created booking {booking.id} for turf {turf.id} on {booking_date} {start_time}-{end_time}")

    result = SubmissionResult(booking=booking)

    # Points and email are not part of the booking transaction
    if use_points:
        try:
            debited = debit_points(db, user.id, total_price)
            # one point per currency unit
            booking.total_price = round(max(0, total_price - debited), 2)
            db.commit()
            db.refresh(booking)
            result.points_debited = debited
            logger.debug(f"Debited {debited} points from user {user.id}, booking {booking.id} now {booking.total_price}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Failed to debit points for booking {booking.id}: {e}")
            result.warnings.append("Booking confirmed but your points balance could not be updated.")

    warning = notifier.send_booking_email(
        "confirmation", notifier.booking_details(booking, turf.name), booking.user_email
    )
    if warning:
        result.warnings.append(warning)
    return result


def booking_starts_at(booking: Booking) -> datetime:
    minutes = to_minutes(booking.start_time)
    return datetime.combine(booking.booking_date, datetime.min.time()) + timedelta(minutes=minutes)


def can_cancel(booking: Booking, now: Optional[datetime] = None) -> bool:
    """Confirmed bookings can be cancelled up to the lead time before they start."""
    if booking.status != "confirmed":
        return False
    now = now or datetime.now()
    lead = timedelta(hours=config.CANCELLATION_LEAD_HOURS)
    return booking_starts_at(booking) - now >= lead


def cancel_booking(
    db: Session,
    booking: Booking,
    user: SessionContext,
    now: Optional[datetime] = None,
    enforce_window: bool = True,
) -> List[str]:
    """Cancel a confirmed booking and return any non-fatal warnings."""
    if booking.status != "confirmed":
        raise BookingNotCancellable(f"Only confirmed bookings can be cancelled (status: {booking.status})")
    if enforce_window and not can_cancel(booking, now):
        raise CancellationWindowClosed(
            f"Cancellation is only available {config.CANCELLATION_LEAD_HOURS} hours before the booking time"
        )

    booking.status = "cancelled"
    db.commit()
    db.refresh(booking)
    logger.debug(f"Cancelled booking {booking.id} by user {user.id}")

    warning = notifier.send_booking_email(
        "cancellation", notifier.booking_details(booking, booking.turf.name), booking.user_email
    )
    return [warning] if warning else []
