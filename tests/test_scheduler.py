import pytest
from datetime import date, datetime
from sqlalchemy.exc import IntegrityError

from app import config
from app.models.booking import Booking
from app.models.points import UserPoints
from app.utils import notifier, scheduler
from app.utils.auth import SessionContext

from tests.conf_tests import (
    OTHER_USER_ID,
    clear_db,
    no_notifications,
    test_db,
    test_user,
    test_turf,
)

MATCH_DAY = date(2024, 6, 1)
DAY_BEFORE = datetime(2024, 5, 31, 12, 0)


# pylint: disable-next=redefined-outer-name
def test_book_conflict_cancel_rebook(test_db, test_turf, test_user):
    first = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:00", "10:00", test_user)
    assert first.booking.status == "confirmed"

    rival = SessionContext(id=OTHER_USER_ID, email="rival@example.com")
    with pytest.raises(scheduler.SlotUnavailable) as exc:
        scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:30", "10:30", rival)
    assert exc.value.booked_slots == [("09:00", "10:00")]

    scheduler.cancel_booking(test_db, first.booking, test_user, now=DAY_BEFORE)
    assert first.booking.status == "cancelled"

    second = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:30", "10:30", rival)
    assert second.booking.status == "confirmed"
    assert scheduler.fetch_confirmed_slots(test_db, test_turf.id, MATCH_DAY) == [("09:30", "10:30")]


# pylint: disable-next=redefined-outer-name
def test_invalid_interval_is_rejected_before_any_write(test_db, test_turf, test_user):
    with pytest.raises(scheduler.InvalidBookingTime):
        scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "10:00", "09:00", test_user)
    with pytest.raises(scheduler.InvalidBookingTime):
        scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "21:00", "25:00", test_user)
    assert test_db.query(Booking).count() == 0


# pylint: disable-next=redefined-outer-name
def test_price_follows_duration(test_db, test_turf, test_user):
    result = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:00", "10:30", test_user)
    assert result.booking.total_price == 2250


# pylint: disable-next=redefined-outer-name
def test_can_cancel_respects_lead_time(test_db, test_turf, test_user):
    booking = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "18:00", "19:00", test_user).booking
    assert scheduler.can_cancel(booking, now=datetime(2024, 6, 1, 11, 0))
    assert not scheduler.can_cancel(booking, now=datetime(2024, 6, 1, 11, 1))

    with pytest.raises(scheduler.CancellationWindowClosed):
        scheduler.cancel_booking(test_db, booking, test_user, now=datetime(2024, 6, 1, 17, 0))
    assert booking.status == "confirmed"


# pylint: disable-next=redefined-outer-name
def test_cancelled_booking_cannot_be_cancelled_again(test_db, test_turf, test_user):
    booking = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:00", "10:00", test_user).booking
    scheduler.cancel_booking(test_db, booking, test_user, now=DAY_BEFORE)
    assert not scheduler.can_cancel(booking, now=DAY_BEFORE)
    with pytest.raises(scheduler.BookingNotCancellable):
        scheduler.cancel_booking(test_db, booking, test_user, now=DAY_BEFORE)


# pylint: disable-next=redefined-outer-name
def test_notification_failure_is_a_warning(monkeypatch, test_db, test_turf, test_user):
    monkeypatch.setattr(config, "NOTIFICATION_URL", "http://mailer.test/send-email")
    sent = []

    def fake_send(email_type, details, to):
        sent.append((email_type, details["bookingId"], to))
        return "Booking confirmation email could not be sent."

    monkeypatch.setattr(notifier, "send_booking_email", fake_send)

    result = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:00", "10:00", test_user)
    assert result.booking.status == "confirmed"
    assert result.warnings == ["Booking confirmation email could not be sent."]
    assert sent == [("confirmation", result.booking.id, "player@example.com")]


# pylint: disable-next=redefined-outer-name
def test_points_discount_reaches_confirmation_email(monkeypatch, test_db, test_turf, test_user):
    test_db.add(UserPoints(user_id=test_user.id, points=350))
    test_db.commit()
    sent = []
    monkeypatch.setattr(notifier, "send_booking_email", lambda email_type, details, to: sent.append(details))

    result = scheduler.submit_booking(test_db, test_turf, MATCH_DAY, "09:00", "10:00", test_user, use_points=True)
    assert result.points_debited == 350
    assert result.booking.total_price == 1150
    assert sent[0]["totalPrice"] == 1150


@pytest.mark.parametrize(
    "message, is_slot",
    [
        ("UNIQUE constraint failed: bookings.turf_id, bookings.booking_date, bookings.start_time", True),
        ('duplicate key value violates unique constraint "unique_booking_slot_confirmed"', True),
        ("UNIQUE constraint failed: bookings.id", False),
        ('duplicate key value violates unique constraint "bookings_pkey"', False),
    ],
)
def test_only_the_slot_index_counts_as_a_lost_race(message, is_slot):
    error = IntegrityError("INSERT INTO bookings", {}, Exception(message))
    assert scheduler._is_slot_violation(error) is is_slot
