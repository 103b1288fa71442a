"""SQLAlchemy models for BeachVillas.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from beachvillas.models.booking import Booking, BookingPayment
from beachvillas.models.message import Message, MessageThread
from beachvillas.models.notification import AdminAction, Notification
from beachvillas.models.review import Review
from beachvillas.models.user import User, UserProfile
from beachvillas.models.villa import (
    Amenity,
    Villa,
    VillaAvailability,
    VillaPhoto,
    VillaPricingSeason,
    VillaRule,
    villa_amenities,
)

__all__ = [
    "AdminAction",
    "Amenity",
    "Booking",
    "BookingPayment",
    "Message",
    "MessageThread",
    "Notification",
    "Review",
    "User",
    "UserProfile",
    "Villa",
    "VillaAvailability",
    "VillaPhoto",
    "VillaPricingSeason",
    "VillaRule",
    "villa_amenities",
]
