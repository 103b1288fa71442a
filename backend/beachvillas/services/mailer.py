"""Transactional email: compose templated messages and simulate the send."""

import logging
from dataclasses import dataclass

from beachvillas.config import settings

logger = logging.getLogger(__name__)

TEMPLATES = {
    "welcome": {
        "subject": "Welcome to BeachVillas, {name}!",
        "body": (
            "Hi {name},\n\n"
            "Your BeachVillas account is ready. Start exploring villas at {frontend_url}.\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
    "password_reset": {
        "subject": "Reset your BeachVillas password",
        "body": (
            "Hi {name},\n\n"
            "We received a request to reset your password. Use this link within "
            "{expire_minutes} minutes:\n\n"
            "{frontend_url}/reset-password?email={email}&token={token}\n\n"
            "If you did not ask for this, you can ignore this email.\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
    "password_changed": {
        "subject": "Your BeachVillas password was changed",
        "body": (
            "Hi {name},\n\n"
            "The password for {email} was just changed. If this was not you, "
            "contact support immediately.\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
    "booking_confirmation": {
        "subject": "Booking Confirmed: {villa_name}",
        "body": (
            "Dear {guest_name},\n\n"
            "Your booking at {villa_name} has been confirmed.\n\n"
            "Booking Details:\n"
            "- Villa: {villa_name}\n"
            "- Check-in: {check_in}\n"
            "- Check-out: {check_out}\n"
            "- Guests: {number_of_guests}\n"
            "- Total Price: {total_price} {currency}\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
    "booking_request": {
        "subject": "Booking request sent: {villa_name}",
        "body": (
            "Dear {guest_name},\n\n"
            "Your request to stay at {villa_name} from {check_in} to {check_out} "
            "was sent to the host. We will let you know when they respond.\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
    "booking_rejected": {
        "subject": "Booking request declined: {villa_name}",
        "body": (
            "Dear {guest_name},\n\n"
            "Unfortunately the host could not accept your request for {villa_name} "
            "({check_in} to {check_out}).\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
    "booking_cancellation": {
        "subject": "Booking Cancelled: {villa_name}",
        "body": (
            "Dear {guest_name},\n\n"
            "Your booking at {villa_name} ({check_in} to {check_out}) "
            "has been cancelled.\n\n"
            "Best regards,\nBeachVillas"
        ),
    },
}

VALID_TEMPLATES = set(TEMPLATES.keys())


@dataclass
class Email:
    recipient: str
    subject: str
    body: str
    template: str
    sender: str = settings.mail_from


def render(template: str, **template_vars: object) -> tuple[str, str]:
    """Render ``template`` into ``(subject, body)``.

    Raises:
        ValueError: If the template name is unknown.
        KeyError: If a template variable is missing.
    """
    if template not in VALID_TEMPLATES:
        raise ValueError(f"Invalid template '{template}'. Must be one of: {', '.join(sorted(VALID_TEMPLATES))}")
    template_vars.setdefault("frontend_url", settings.frontend_url)
    tmpl = TEMPLATES[template]
    return tmpl["subject"].format(**template_vars), tmpl["body"].format(**template_vars)


def send_email(recipient: str, template: str, **template_vars: object) -> Email:
    """Compose an email and log it (simulated send)."""
    subject, body = render(template, **template_vars)
    email = Email(recipient=recipient, subject=subject, body=body, template=template)
    logger.info("Email sent [%s] to %s: %s", template, recipient, subject)
    return email


def booking_vars(booking) -> dict:
    """Template variables for the booking templates."""
    return {
        "guest_name": booking.guest_full_name,
        "villa_name": booking.villa.name,
        "check_in": booking.check_in.isoformat(),
        "check_out": booking.check_out.isoformat(),
        "number_of_guests": booking.number_of_guests,
        "total_price": booking.total_price,
        "currency": booking.currency,
    }
