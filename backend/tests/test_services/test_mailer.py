"""Tests for email rendering and the simulated send."""

import logging
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from beachvillas.services.mailer import booking_vars, render, send_email


class TestRender:
    def test_welcome_uses_frontend_url(self):
        subject, body = render("welcome", name="Alice", frontend_url="https://beachvillas.test")
        assert subject == "Welcome to BeachVillas, Alice!"
        assert "https://beachvillas.test" in body

    def test_unknown_template_raises(self):
        with pytest.raises(ValueError, match="Invalid template"):
            render("newsletter", name="Alice")

    def test_missing_variable_raises(self):
        with pytest.raises(KeyError):
            render("booking_confirmation", guest_name="Alice")


class TestSendEmail:
    def test_send_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="beachvillas.services.mailer"):
            email = send_email("alice@example.com", "welcome", name="Alice")

        assert email.recipient == "alice@example.com"
        assert email.template == "welcome"
        assert "Email sent [welcome] to alice@example.com" in caplog.text

    def test_booking_templates_render_from_booking(self):
        booking = SimpleNamespace(
            guest_full_name="Alice Guest",
            villa=SimpleNamespace(name="Casa del Mar"),
            check_in=date(2025, 7, 1),
            check_out=date(2025, 7, 4),
            number_of_guests=2,
            total_price=Decimal("975.00"),
            currency="USD",
        )
        email = send_email("alice@example.com", "booking_confirmation", **booking_vars(booking))
        assert email.subject == "Booking Confirmed: Casa del Mar"
        assert "- Check-in: 2025-07-01" in email.body
        assert "975.00 USD" in email.body
