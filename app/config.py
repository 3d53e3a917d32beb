import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/turf_booking.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG").upper()

# JWT verification. Tokens are issued by the external auth service.
JWT_SECRET = os.getenv("JWT_SECRET", "secure-secret-key-1234567890")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ADMIN_EMAILS = {
    email.strip().lower()
    for email in os.getenv("ADMIN_EMAILS", "").split(",")
    if email.strip()
}

# Booking rules
CANCELLATION_LEAD_HOURS = int(os.getenv("CANCELLATION_LEAD_HOURS", "7"))

# Gamification
INITIAL_POINTS = int(os.getenv("INITIAL_POINTS", "350"))
REFERRAL_POINTS = int(os.getenv("REFERRAL_POINTS", "100"))
LEADERBOARD_SIZE = int(os.getenv("LEADERBOARD_SIZE", "10"))

# Booking emails are posted here; unset disables dispatch
NOTIFICATION_URL = os.getenv("NOTIFICATION_URL")
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "10"))

# SMTP relay used by the /send-email endpoint
SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", SMTP_USER or "noreply@kicknclick.com")
