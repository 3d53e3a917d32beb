import re
from fastapi import HTTPException, status

TIME_PATTERN = re.compile(r"^(([01]\d|2[0-3]):[0-5]\d|24:00)$")


def validate_slot_time(value):
    if value is not None and not TIME_PATTERN.match(value):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Time must be in 24-hour HH:MM format (e.g., 13:00)",
        )
    return value


def validate_rating(value):
    if value is not None and not 1 <= value <= 5:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rating must be between 1 and 5",
        )
    return value
