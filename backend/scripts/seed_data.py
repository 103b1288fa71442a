"""Seed the database with a small BeachVillas marketplace.

Creates amenities, an admin, two hosts, two travellers and one guest_host
account, three villas with photos, rules, calendar entries and pricing
seasons, plus bookings, payments, message threads, reviews, notifications
and admin actions that exercise every dashboard.

Every seeded account uses the password ``password123``.

Run from the backend directory:
    python -m scripts.seed_data
"""

import asyncio
import sys
from datetime import date, timedelta
from decimal import Decimal
from pathlib import Path

# Add backend to path so imports work when run as a script
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import delete, select

from beachvillas.auth.passwords import hash_password
from beachvillas.database import async_session_factory, utcnow
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
)
from beachvillas.services.pricing import quote

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

SEED_PASSWORD = "password123"

AMENITIES = [
    ("Wi-Fi", "wifi"),
    ("Swimming Pool", "pool"),
    ("Air Conditioning", "aircon"),
    ("Free Parking", "parking"),
    ("Kitchen", "kitchen"),
    ("Washer", "washer"),
    ("Pet Friendly", "pet_friendly"),
    ("Sea View", "sea_view"),
    ("Television", "tv"),
    ("BBQ Grill", "bbq"),
    ("Fitness Room", "gym"),
]

USERS = [
    {
        "key": "admin",
        "email": "admin@beachvillas.com",
        "name": "Site Admin",
        "role": "admin",
        "phone": "+1234567890",
        "about": "Platform admin, not bookable.",
        "locale": "en-US",
    },
    {
        "key": "olivia",
        "email": "host1@beachvillas.com",
        "name": "Olivia Host",
        "role": "host",
        "phone": "+1987654321",
        "payout_method_details": "Bank:1234",
        "is_verified_host": True,
        "about": "Our family welcomes you to our sunny villa!",
        "locale": "en-US",
    },
    {
        "key": "noah",
        "email": "host2@beachvillas.com",
        "name": "Noah Host",
        "role": "host",
        "payout_method_details": "Bank:5678",
        "about": "Lover of surf, fun, and summer getaways.",
        "locale": "it-IT",
    },
    {
        "key": "amelia",
        "email": "trav1@example.com",
        "name": "Amelia Guest",
        "role": "guest",
        "phone": "+1122334455",
        "about": "Beach fanatic and foodie.",
        "locale": "en-US",
    },
    {
        "key": "liam",
        "email": "trav2@example.com",
        "name": "Liam Guest",
        "role": "guest",
        "phone": "+4412345678",
        "about": "Travel writer, occasional kitesurfer.",
        "locale": "fr-FR",
    },
    {
        "key": "sofia",
        "email": "dualuser@example.com",
        "name": "Sofia Dual",
        "role": "guest_host",
        "phone": "+1222333444",
        "payout_method_details": "Bank:9090",
        "is_verified_host": True,
        "about": "Host and explorer, here for sun and fun.",
        "locale": "pt-BR",
    },
]

VILLAS = [
    {
        "key": "sunny",
        "host": "olivia",
        "name": "Sunny Beach Villa",
        "short_description": "A bright beachfront family villa",
        "long_description": "Spacious and modern villa directly on the sand, with a large pool and BBQ.",
        "address": "123 Ocean Dr",
        "city": "Miami",
        "country": "USA",
        "latitude": "25.7617",
        "longitude": "-80.1918",
        "max_occupancy": 6,
        "is_instant_book": True,
        "status": "active",
        "base_price_per_night": Decimal("350.00"),
        "minimum_stay_nights": 2,
        "security_deposit": Decimal("100.00"),
        "cleaning_fee": Decimal("40.00"),
        "service_fee": Decimal("25.00"),
        "photos": [("Poolside at sunset", "sunny_1"), ("Front of the villa", "sunny_2")],
        "amenities": ["wifi", "pool", "kitchen"],
        "rules": [("smoking", "no"), ("pets_allowed", "yes"), ("custom", "No loud music after 10pm.")],
    },
    {
        "key": "tuscan",
        "host": "noah",
        "name": "Tuscan Coast House",
        "short_description": "Rustic Italian with Sea View",
        "long_description": "Stone house with panoramic sea views, olive groves, and local charm.",
        "address": "8 Via Lungomare",
        "city": "Viareggio",
        "country": "Italy",
        "latitude": "43.8718",
        "longitude": "10.2578",
        "max_occupancy": 4,
        "is_instant_book": False,
        "status": "pending",
        "base_price_per_night": Decimal("280.00"),
        "minimum_stay_nights": 3,
        "security_deposit": Decimal("90.00"),
        "cleaning_fee": Decimal("30.00"),
        "service_fee": Decimal("20.00"),
        "photos": [("Sea view from the window", "tuscan_1")],
        "amenities": ["wifi", "sea_view", "parking"],
        "rules": [("party", "no")],
    },
    {
        "key": "surf",
        "host": "sofia",
        "name": "Sofia's Surf Camp",
        "short_description": "Perfect for surfing groups",
        "long_description": "Right on the sand with surfboard storage, breakfast included.",
        "address": "2 Beach Blvd",
        "city": "Lisbon",
        "country": "Portugal",
        "latitude": "38.7223",
        "longitude": "-9.1393",
        "max_occupancy": 8,
        "is_instant_book": True,
        "status": "active",
        "base_price_per_night": Decimal("450.00"),
        "minimum_stay_nights": 4,
        "security_deposit": Decimal("150.00"),
        "cleaning_fee": Decimal("70.00"),
        "service_fee": Decimal("40.00"),
        "admin_notes": "Feature for adventure travelers.",
        "photos": [("Surfboards by the wall", "surf_1")],
        "amenities": ["wifi", "bbq", "gym", "pet_friendly", "aircon"],
        "rules": [("custom", "Surfboards must be rinsed before storage.")],
    },
]


def _photo_url(seed: str) -> str:
    return f"https://picsum.photos/seed/{seed}/600/400"


async def seed() -> None:
    """Delete any previous seed accounts and rebuild the demo marketplace."""
    async with async_session_factory() as session:
        # ------------------------------------------------------------------
        # 0. Remove previous seed data (villas, bookings etc. cascade)
        # ------------------------------------------------------------------
        emails = [u["email"] for u in USERS]
        existing = await session.execute(select(User.id).where(User.email.in_(emails)))
        if existing.first() is not None:
            print("⚠️  Seed accounts already exist. Deleting and re-seeding...")
            await session.execute(delete(User).where(User.email.in_(emails)))
        await session.execute(delete(Amenity).where(Amenity.key.in_([key for _, key in AMENITIES])))
        await session.flush()

        # ------------------------------------------------------------------
        # 1. Amenities
        # ------------------------------------------------------------------
        amenities = {
            key: Amenity(name=name, key=key, icon_url=f"https://picsum.photos/seed/{key}/60/60")
            for name, key in AMENITIES
        }
        session.add_all(amenities.values())
        await session.flush()
        print(f"✅ Created {len(amenities)} amenities")

        # ------------------------------------------------------------------
        # 2. Users and profiles
        # ------------------------------------------------------------------
        users: dict[str, User] = {}
        password_hash = hash_password(SEED_PASSWORD)
        for data in USERS:
            data = dict(data)
            key, about, locale = data.pop("key"), data.pop("about"), data.pop("locale")
            user = User(
                hashed_password=password_hash,
                profile_photo_url=f"https://picsum.photos/seed/{key}/100",
                profile=UserProfile(about=about, locale=locale),
                **data,
            )
            session.add(user)
            users[key] = user
        await session.flush()
        print(f"✅ Created {len(users)} users")

        # ------------------------------------------------------------------
        # 3. Villas with photos, amenities, rules
        # ------------------------------------------------------------------
        villas: dict[str, Villa] = {}
        for data in VILLAS:
            data = dict(data)
            key = data.pop("key")
            host = users[data.pop("host")]
            photos = [
                VillaPhoto(photo_url=_photo_url(seed), caption=caption, sort_order=i)
                for i, (caption, seed) in enumerate(data.pop("photos"))
            ]
            villa = Villa(
                host_id=host.id,
                photos=photos,
                amenities=[amenities[k] for k in data.pop("amenities")],
                rules=[VillaRule(rule_type=t, value=v) for t, v in data.pop("rules")],
                **data,
            )
            session.add(villa)
            villas[key] = villa
            print(f"   🏠 {villa.name}: {villa.city}, {villa.country} (${villa.base_price_per_night}/night)")
        await session.flush()

        # ------------------------------------------------------------------
        # 4. Calendar entries and pricing seasons
        # ------------------------------------------------------------------
        today = date.today()
        session.add_all(
            [
                VillaAvailability(villa_id=villas["sunny"].id, date=today + timedelta(days=20), note="Holiday weekend"),
                VillaAvailability(
                    villa_id=villas["sunny"].id,
                    date=today + timedelta(days=21),
                    is_available=False,
                    note="Blocked for maintenance",
                ),
                VillaAvailability(
                    villa_id=villas["tuscan"].id,
                    date=today + timedelta(days=20),
                    price_override=Decimal("320.00"),
                    minimum_stay_override=2,
                ),
                VillaAvailability(villa_id=villas["surf"].id, date=today + timedelta(days=20), note="Surf festival"),
                VillaPricingSeason(
                    villa_id=villas["sunny"].id,
                    season_name="Summer High",
                    start_date=today + timedelta(days=60),
                    end_date=today + timedelta(days=150),
                    nightly_price=Decimal("450.00"),
                    minimum_stay_nights=4,
                ),
                VillaPricingSeason(
                    villa_id=villas["surf"].id,
                    season_name="Surf Season",
                    start_date=today + timedelta(days=30),
                    end_date=today + timedelta(days=53),
                    nightly_price=Decimal("520.00"),
                    minimum_stay_nights=5,
                ),
            ]
        )
        await session.flush()

        # ------------------------------------------------------------------
        # 5. Bookings, payments and threads
        # ------------------------------------------------------------------
        now = utcnow()
        booking_specs = [
            # A completed, paid, reviewed stay
            ("amelia", "sunny", today - timedelta(days=20), today - timedelta(days=16), 4, "confirmed", "Need a baby crib"),
            # A request waiting for Noah
            ("liam", "tuscan", today + timedelta(days=30), today + timedelta(days=33), 2, "pending", None),
            # Another completed stay
            ("amelia", "surf", today - timedelta(days=12), today - timedelta(days=7), 5, "confirmed", "Vegetarian breakfast"),
            # Upcoming and paid
            ("liam", "sunny", today + timedelta(days=8), today + timedelta(days=11), 2, "confirmed", None),
        ]
        bookings: list[Booking] = []
        for guest_key, villa_key, check_in, check_out, party, status, requests in booking_specs:
            guest, villa = users[guest_key], villas[villa_key]
            price = await quote(session, villa, check_in, check_out)
            confirmed = status == "confirmed"
            booking = Booking(
                villa_id=villa.id,
                guest_id=guest.id,
                host_id=villa.host_id,
                check_in=check_in,
                check_out=check_out,
                number_of_guests=party,
                status=status,
                booking_type="instant" if villa.is_instant_book else "request",
                nightly_subtotal=price["nightly_subtotal"],
                cleaning_fee=price["cleaning_fee"],
                service_fee=price["service_fee"],
                security_deposit=price["security_deposit"],
                total_price=price["total"],
                currency=price["currency"],
                payment_status="paid" if confirmed else "pending",
                special_requests=requests,
                guest_full_name=guest.name,
                guest_email=guest.email,
                guest_phone=guest.phone or "+0000000000",
                confirmed_at=now if confirmed else None,
            )
            session.add(booking)
            await session.flush()
            if confirmed:
                session.add(
                    BookingPayment(
                        booking_id=booking.id,
                        payment_method="credit_card",
                        status="success",
                        amount_paid=booking.total_price,
                        transaction_reference=f"SEED-{len(bookings) + 1:04d}",
                        paid_at=now,
                    )
                )
            bookings.append(booking)
        await session.flush()
        print(f"✅ Created {len(bookings)} bookings")

        threads = []
        for booking in bookings:
            thread = MessageThread(
                booking_id=booking.id,
                villa_id=booking.villa_id,
                guest_id=booking.guest_id,
                host_id=booking.host_id,
            )
            session.add(thread)
            threads.append(thread)
        await session.flush()

        conversation = [
            (threads[0], "amelia", "olivia", "Excited for our stay! Is early check-in possible?", False, 0),
            (threads[0], "olivia", "amelia", "Hi Amelia, yes early check-in is fine!", True, 1),
            (threads[1], "liam", "noah", "Is the parking secure for motorcycles?", False, 0),
            (threads[2], "amelia", "sofia", "Will there be surf instructors available?", False, 0),
        ]
        for thread, sender, receiver, content, is_read, minutes in conversation:
            session.add(
                Message(
                    thread_id=thread.id,
                    sender_id=users[sender].id,
                    receiver_id=users[receiver].id,
                    content=content,
                    is_read=is_read,
                    sent_at=now + timedelta(minutes=minutes),
                )
            )
        await session.flush()

        # ------------------------------------------------------------------
        # 6. Reviews, notifications and admin actions
        # ------------------------------------------------------------------
        reviews = [
            Review(
                booking_id=bookings[0].id,
                villa_id=villas["sunny"].id,
                reviewer_id=users["amelia"].id,
                reviewee_id=users["olivia"].id,
                rating=5,
                review_text="Amazing house, beachfront is spectacular. Will return!",
                review_type="guest_to_villa",
            ),
            Review(
                booking_id=bookings[2].id,
                villa_id=villas["surf"].id,
                reviewer_id=users["amelia"].id,
                reviewee_id=users["sofia"].id,
                rating=4,
                review_text="Great surf spot, fantastic hosts, breakfast was delicious.",
                review_type="guest_to_villa",
            ),
            Review(
                booking_id=bookings[0].id,
                villa_id=None,
                reviewer_id=users["olivia"].id,
                reviewee_id=users["amelia"].id,
                rating=5,
                review_text="Wonderful guest, respected all house rules.",
                review_type="host_to_guest",
            ),
        ]
        session.add_all(reviews)

        session.add_all(
            [
                Notification(
                    user_id=users["olivia"].id,
                    type="booking_confirmed",
                    content="You have a new confirmed booking at Sunny Beach Villa",
                    related_booking_id=bookings[3].id,
                    related_villa_id=villas["sunny"].id,
                ),
                Notification(
                    user_id=users["liam"].id,
                    type="booking_confirmed",
                    content="Your booking has been confirmed for Sunny Beach Villa",
                    is_read=True,
                    related_booking_id=bookings[3].id,
                    related_villa_id=villas["sunny"].id,
                ),
                Notification(
                    user_id=users["noah"].id,
                    type="booking_request",
                    content="You received a new booking request for Tuscan Coast House",
                    related_booking_id=bookings[1].id,
                    related_villa_id=villas["tuscan"].id,
                ),
                Notification(
                    user_id=users["sofia"].id,
                    type="booking_confirmed",
                    content="Your villa was booked! Get ready for your next guest.",
                    is_read=True,
                    related_booking_id=bookings[2].id,
                    related_villa_id=villas["surf"].id,
                ),
            ]
        )
        await session.flush()

        session.add(
            AdminAction(
                admin_id=users["admin"].id,
                action_type="update_listing",
                target_type="villa",
                target_id=str(villas["tuscan"].id),
                notes="Fixed typo in description",
            )
        )
        await session.commit()

        print(f"✅ Created {len(threads)} message threads, {len(reviews)} reviews")
        print()
        print("=" * 60)
        print("📊 Seed Summary")
        print("=" * 60)
        print(f"   Users:     {len(users)} (password: {SEED_PASSWORD})")
        print(f"   Amenities: {len(amenities)}")
        print(f"   Villas:    {len(villas)}")
        print(f"   Bookings:  {len(bookings)}")
        print("=" * 60)
        print("🎉 Done! Log in as admin@beachvillas.com, host1@beachvillas.com or trav1@example.com")


if __name__ == "__main__":
    asyncio.run(seed())
