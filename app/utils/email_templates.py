from datetime import date
from html import escape

BRAND = "kickNclick"
SUPPORT_EMAIL = "support@kicknclick.com"

THEME = {
    "confirmation": {"color": "#059669", "heading": "BOOKING CONFIRMATION", "badge": "Confirmed"},
    "cancellation": {"color": "#dc2626", "heading": "BOOKING CANCELLED", "badge": "Cancelled"},
}


def format_price(amount) -> str:
    return f"₹{amount:,.0f}"


def short_booking_id(booking_id: str) -> str:
    return "#" + booking_id[:8].upper()


def _row(label, value):
    return (
        '<tr style="border-bottom: 1px solid #e5e7eb;">'
        f'<td style="padding: 12px 0; color: #6b7280;">{label}</td>'
        f'<td style="padding: 12px 0; color: #111827; text-align: right; font-weight: 600;">{value}</td>'
        "</tr>"
    )


def _layout(email_type, intro, rows, price_label, amount, footer_note):
    theme = THEME[email_type]
    return f"""
<div style="max-width: 600px; margin: 0 auto; font-family: Arial, sans-serif; background-color: #ffffff;">
  <div style="background: {theme['color']}; padding: 25px 20px;">
    <h1 style="color: white; margin: 0; font-size: 28px;">{theme['heading']}</h1>
  </div>
  <div style="padding: 30px 25px; color: #333333;">
    <p style="margin-top: 0;">Hello,</p>
    <p>{intro}</p>
    <div style="display: inline-block; padding: 8px 16px; background: {theme['color']}; color: white; border-radius: 30px;">{theme['badge']}</div>
    <table style="width: 100%; border-collapse: collapse; margin: 25px 0;">{''.join(rows)}</table>
    <div style="background: {theme['color']}; padding: 25px; text-align: center; color: white;">
      <div style="font-size: 14px;">{price_label}</div>
      <div style="font-size: 32px; font-weight: 700;">{format_price(amount)}</div>
    </div>
    <p style="color: #4b5563;">{footer_note}</p>
    <p style="text-align: center; color: #6b7280;">Have questions? <a href="mailto:{SUPPORT_EMAIL}">{SUPPORT_EMAIL}</a></p>
    <p style="text-align: center; font-size: 12px; color: #6b7280;">&copy; {date.today().year} {BRAND}. All rights reserved.</p>
  </div>
</div>
"""


def booking_confirmation_template(details):
    booking_ref = short_booking_id(details.booking_id)
    rows = [
        _row("Booking ID", booking_ref),
        _row("Turf Name", escape(details.turf_name)),
        _row("Date", escape(details.date)),
        _row("Duration", f"{escape(details.start_time)} - {escape(details.end_time)}"),
    ]
    html = _layout(
        "confirmation",
        "Great news! Your turf booking has been confirmed. We look forward to having you play with us.",
        rows,
        "TOTAL AMOUNT",
        details.total_price,
        f"Please arrive 15 minutes before your slot and present your Booking ID ({booking_ref}) for verification.",
    )
    return f"Your Booking is Confirmed - {BRAND}", html


def booking_cancellation_template(details):
    rows = [
        _row("Booking ID", short_booking_id(details.booking_id)),
        _row("Turf Name", escape(details.turf_name)),
        _row("Date", escape(details.date)),
        _row("Cancelled On", date.today().isoformat()),
    ]
    html = _layout(
        "cancellation",
        "Your turf booking has been cancelled successfully.",
        rows,
        "REFUND AMOUNT",
        details.total_price,
        "Any refund is processed according to our cancellation policy.",
    )
    return f"Your Booking Has Been Cancelled - {BRAND}", html


TEMPLATES = {
    "confirmation": booking_confirmation_template,
    "cancellation": booking_cancellation_template,
}
