import pytest
from datetime import date, timedelta
from fastapi import status

from app.models.booking import Booking
from app.models.points import UserPoints
from app.utils import scheduler

from tests.conf_tests import (
    USER_ID,
    client,
    clear_db,
    no_notifications,
    test_db,
    auth_headers,
    other_headers,
    admin_headers,
    test_turf,
)

FUTURE_DATE = date.today() + timedelta(days=7)


def booking_payload(turf, start="09:00", end="10:00", booking_date=FUTURE_DATE, **extra):
    payload = {
        "turf_id": turf.id,
        "booking_date": booking_date.isoformat(),
        "start_time": start,
        "end_time": end,
    }
    payload.update(extra)
    return payload


# Fixtures
@pytest.fixture
def test_booking(test_db, test_turf): # pylint: disable=redefined-outer-name
    booking = Booking(
        turf_id=test_turf.id,
        user_id=USER_ID,
        user_email="player@example.com",
        booking_date=FUTURE_DATE,
        start_time="09:00",
        end_time="10:00",
        total_price=1500,
        status="confirmed",
    )
    test_db.add(booking)
    test_db.commit()
    test_db.refresh(booking)
    return booking


# Tests
# pylint: disable-next=redefined-outer-name
def test_create_booking_success(auth_headers, test_turf):
    response = client.post("/bookings/", json=booking_payload(test_turf, "18:00", "20:00"), headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["turf_id"] == test_turf.id
    assert data["user_id"] == USER_ID
    assert data["status"] == "confirmed"
    assert data["start_time"] == "18:00"
    assert data["end_time"] == "20:00"
    assert data["total_price"] == 3000
    assert data["warnings"] == []


# pylint: disable-next=redefined-outer-name
def test_create_booking_with_duration(auth_headers, test_turf):
    payload = booking_payload(test_turf, "10:00", None, duration=2)
    del payload["end_time"]
    response = client.post("/bookings/", json=payload, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["end_time"] == "12:00"


# pylint: disable-next=redefined-outer-name
def test_create_booking_requires_end_or_duration(auth_headers, test_turf):
    payload = booking_payload(test_turf)
    del payload["end_time"]
    response = client.post("/bookings/", json=payload, headers=auth_headers)
    assert response.status_code == 422


# pylint: disable-next=redefined-outer-name
def test_create_booking_unauthorized(test_turf):
    response = client.post("/bookings/", json=booking_payload(test_turf))
    assert response.status_code in [
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    ]


# pylint: disable-next=redefined-outer-name
def test_create_booking_invalid_time_format(auth_headers, test_turf):
    response = client.post("/bookings/", json=booking_payload(test_turf, "9am", "10:00"), headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "HH:MM" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
@pytest.mark.parametrize("start, end", [("10:00", "10:00"), ("11:00", "10:00")])
def test_create_booking_rejects_inverted_interval(auth_headers, test_turf, test_db, start, end):
    response = client.post("/bookings/", json=booking_payload(test_turf, start, end), headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "after start time" in response.json()["detail"]
    assert test_db.query(Booking).count() == 0


# pylint: disable-next=redefined-outer-name
def test_create_booking_turf_not_found(auth_headers):
    payload = {
        "turf_id": "missing",
        "booking_date": FUTURE_DATE.isoformat(),
        "start_time": "09:00",
        "end_time": "10:00",
    }
    response = client.post("/bookings/", json=payload, headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_create_booking_overlapping(other_headers, test_turf, test_booking):
    response = client.post("/bookings/", json=booking_payload(test_turf, "09:30", "10:30"), headers=other_headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    detail = response.json()["detail"]
    assert "already booked" in detail["message"]
    assert detail["booked_slots"] == [{"start_time": "09:00", "end_time": "10:00"}]


# pylint: disable-next=redefined-outer-name
def test_create_booking_touching_slot_is_allowed(other_headers, test_turf, test_booking):
    response = client.post("/bookings/", json=booking_payload(test_turf, "10:00", "11:00"), headers=other_headers)
    assert response.status_code == status.HTTP_201_CREATED


# pylint: disable-next=redefined-outer-name
def test_same_slot_on_another_date_is_allowed(other_headers, test_turf, test_booking):
    payload = booking_payload(test_turf, "09:00", "10:00", booking_date=FUTURE_DATE + timedelta(days=1))
    response = client.post("/bookings/", json=payload, headers=other_headers)
    assert response.status_code == status.HTTP_201_CREATED


# pylint: disable-next=redefined-outer-name
def test_lost_race_is_reported_as_conflict(monkeypatch, other_headers, test_turf, test_booking, test_db):
    """A request whose availability read is stale is stopped by the unique index."""
    real_fetch = scheduler.fetch_confirmed_slots
    calls = []

    def stale_fetch(db, turf_id, booking_date):
        calls.append(turf_id)
        if len(calls) == 1:
            return []
        return real_fetch(db, turf_id, booking_date)

    monkeypatch.setattr(scheduler, "fetch_confirmed_slots", stale_fetch)

    response = client.post("/bookings/", json=booking_payload(test_turf, "09:00", "10:00"), headers=other_headers)
    assert response.status_code == status.HTTP_409_CONFLICT
    detail = response.json()["detail"]
    assert "just booked by someone else" in detail["message"]
    assert detail["booked_slots"] == [{"start_time": "09:00", "end_time": "10:00"}]

    confirmed = test_db.query(Booking).filter(Booking.status == "confirmed").all()
    assert len(confirmed) == 1
    assert confirmed[0].id == test_booking.id


# pylint: disable-next=redefined-outer-name
def test_cancel_booking_frees_slot(auth_headers, other_headers, test_turf, test_booking):
    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "cancelled"

    slots = client.get(
        f"/bookings/booked_slots/?turf_id={test_turf.id}&date={FUTURE_DATE}"
    ).json()
    assert slots["booked_slots"] == []

    # same start time: the partial unique index ignores cancelled rows
    response = client.post("/bookings/", json=booking_payload(test_turf, "09:00", "10:00"), headers=other_headers)
    assert response.status_code == status.HTTP_201_CREATED


# pylint: disable-next=redefined-outer-name
def test_cancel_booking_twice(auth_headers, test_booking):
    client.post(f"/bookings/{test_booking.id}/cancel", headers=auth_headers)
    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=auth_headers)
    assert response.status_code == status.HTTP_409_CONFLICT


# pylint: disable-next=redefined-outer-name
def test_cancel_booking_not_owner(other_headers, test_booking):
    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=other_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_cancel_booking_not_found(auth_headers):
    response = client.post("/bookings/missing/cancel", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_cancel_inside_lead_time_is_refused(auth_headers, test_booking, test_db):
    test_booking.booking_date = date.today() - timedelta(days=1)
    test_db.commit()
    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "7 hours" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
def test_turf_owner_can_cancel_inside_lead_time(admin_headers, test_booking, test_db):
    test_booking.booking_date = date.today() - timedelta(days=1)
    test_db.commit()
    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "cancelled"


# pylint: disable-next=redefined-outer-name
def test_get_booking(auth_headers, test_booking):
    response = client.get(f"/bookings/{test_booking.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == test_booking.id
    assert data["turf_name"] == "Football Paradise"
    assert data["can_cancel"] is True


# pylint: disable-next=redefined-outer-name
def test_get_booking_of_someone_else(other_headers, test_booking):
    response = client.get(f"/bookings/{test_booking.id}", headers=other_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_get_my_bookings(auth_headers, other_headers, test_booking):
    data = client.get("/bookings/mine", headers=auth_headers).json()
    assert [b["id"] for b in data] == [test_booking.id]
    assert client.get("/bookings/mine", headers=other_headers).json() == []


# pylint: disable-next=redefined-outer-name
def test_get_turf_bookings(admin_headers, auth_headers, test_turf, test_booking):
    response = client.get(f"/turfs/{test_turf.id}/bookings", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()] == [test_booking.id]

    response = client.get(f"/turfs/{test_turf.id}/bookings", headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_get_available_slots(test_turf, test_booking):
    response = client.get(
        f"/bookings/available_slots/?turf_id={test_turf.id}&date={FUTURE_DATE}&duration=1"
    )
    assert response.status_code == status.HTTP_200_OK
    available = response.json()["available_start_times"]
    assert "09:00" not in available
    assert "10:00" in available
    assert available[-1] == "21:00"


# pylint: disable-next=redefined-outer-name
def test_get_available_slots_invalid_duration(test_turf):
    response = client.get(
        f"/bookings/available_slots/?turf_id={test_turf.id}&date={FUTURE_DATE}&duration=0"
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# pylint: disable-next=redefined-outer-name
def test_booking_with_points(auth_headers, test_turf, test_db):
    test_db.add(UserPoints(user_id=USER_ID, points=350))
    test_db.commit()

    response = client.post(
        "/bookings/", json=booking_payload(test_turf, use_points=True), headers=auth_headers
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["points_debited"] == 350
    assert response.json()["total_price"] == 1150
    booking = test_db.query(Booking).filter(Booking.id == response.json()["id"]).one()
    assert booking.total_price == 1150

    balance = test_db.query(UserPoints).filter(UserPoints.user_id == USER_ID).one()
    test_db.refresh(balance)
    assert balance.points == 0


# pylint: disable-next=redefined-outer-name
def test_points_debit_is_capped_by_price(auth_headers, test_turf, test_db):
    test_turf.price = 100
    test_db.add(UserPoints(user_id=USER_ID, points=350))
    test_db.commit()

    response = client.post(
        "/bookings/", json=booking_payload(test_turf, use_points=True), headers=auth_headers
    )
    assert response.json()["points_debited"] == 100
    assert response.json()["total_price"] == 0

    balance = test_db.query(UserPoints).filter(UserPoints.user_id == USER_ID).one()
    test_db.refresh(balance)
    assert balance.points == 250


# pylint: disable-next=redefined-outer-name
def test_points_failure_does_not_undo_booking(monkeypatch, auth_headers, test_turf, test_db):
    from sqlalchemy.exc import OperationalError

    def broken_debit(db, user_id, amount):
        raise OperationalError("UPDATE user_points", {}, Exception("database is locked"))

    monkeypatch.setattr(scheduler, "debit_points", broken_debit)
    response = client.post(
        "/bookings/", json=booking_payload(test_turf, use_points=True), headers=auth_headers
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["points_debited"] == 0
    assert response.json()["total_price"] == 1500
    assert any("points" in w for w in response.json()["warnings"])
    assert test_db.query(Booking).filter(Booking.status == "confirmed").count() == 1

