"""
Best-effort booking emails.

Booking state never depends on these calls: every failure is logged and
returned to the caller as a warning message instead of being raised.
"""
import logging
from typing import Optional

import httpx

from app import config

logger = logging.getLogger(__name__)

EMAIL_TYPES = ("confirmation", "cancellation")


def booking_details(booking, turf_name: str) -> dict:
    return {
        "bookingId": booking.id,
        "turfName": turf_name,
        "date": booking.booking_date.isoformat(),
        "startTime": booking.start_time,
        "endTime": booking.end_time,
        "totalPrice": booking.total_price,
    }


def send_booking_email(email_type: str, details: dict, to: Optional[str]) -> Optional[str]:
    """Post a booking email request. Returns a warning message on failure, else None."""
    if email_type not in EMAIL_TYPES:
        raise ValueError(f"Unknown email type: {email_type}")

    if not config.NOTIFICATION_URL:
        logger.info(f"Notifications disabled, skipping {email_type} email for booking {details['bookingId']}")
        return None
    if not to:
        logger.warning(f"No email address for booking {details['bookingId']}, skipping {email_type} email")
        return f"Booking {email_type} email could not be sent: no email address on file."

    payload = {"to": to, "type": email_type, "bookingDetails": details}
    try:
        response = httpx.post(config.NOTIFICATION_URL, json=payload, timeout=config.NOTIFICATION_TIMEOUT)
        response.raise_for_status()
        result = response.json()
        if not result.get("success", False):
            raise ValueError(result.get("error") or "email endpoint reported failure")
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error sending {email_type} email for booking {details['bookingId']}: {e}")
        return f"Booking {email_type} email could not be sent."

    logger.debug(f"Sent {email_type} email for booking {details['bookingId']} to {to}")
    return None
