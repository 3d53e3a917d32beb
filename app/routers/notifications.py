import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from app import config
from app.schemas.notification import BookingEmailRequest, BookingEmailResponse
from app.utils.email_templates import TEMPLATES

logger = logging.getLogger(__name__)

router = APIRouter(tags=["email"])


class EmailNotConfigured(RuntimeError):
    pass


def deliver_email(to: str, subject: str, html: str) -> None:
    """Hand one HTML message to the SMTP relay."""
    if not config.SMTP_HOST:
        raise EmailNotConfigured("SMTP relay is not configured")

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = config.EMAIL_FROM_ADDRESS
    message["To"] = to
    message.attach(MIMEText(html, "html"))

    context = ssl.create_default_context()
    with smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, context=context, timeout=30) as server:
        if config.SMTP_USER:
            server.login(config.SMTP_USER, config.SMTP_PASSWORD or "")
        server.sendmail(config.EMAIL_FROM_ADDRESS, [to], message.as_string())


@router.post("/send-email", response_model=BookingEmailResponse)
def send_email(payload: BookingEmailRequest):
    """
    Render and send a booking confirmation or cancellation email.
    """
    details = payload.booking_details
    logger.debug(f"Sending {payload.type} email for booking {details.booking_id} to {payload.to}")
    subject, html = TEMPLATES[payload.type](details)
    try:
        deliver_email(payload.to, subject, html)
    except (smtplib.SMTPException, OSError, EmailNotConfigured) as e:
        logger.error(f"Error sending email for booking {details.booking_id}: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(e)},
        )
    logger.debug(f"Email sent for booking {details.booking_id}")
    return BookingEmailResponse(success=True, message="Email sent successfully")
