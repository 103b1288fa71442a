"""Stay pricing: nightly rates, minimum stays and the price breakdown.

Precedence for a given night is the availability override for that date,
then a pricing season covering the date, then the villa's base price. The
minimum stay follows the same order, keyed on the check-in date.
"""

import uuid
from collections.abc import Iterable, Mapping
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from beachvillas.config import settings
from beachvillas.models.villa import Villa, VillaAvailability, VillaPricingSeason

CENTS = Decimal("0.01")


def _money(value: Decimal | int | float | None) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def stay_nights(check_in: date, check_out: date) -> list[date]:
    """Each night of a stay, check-out day excluded."""
    return [check_in + timedelta(days=offset) for offset in range((check_out - check_in).days)]


def season_for(day: date, seasons: Iterable[VillaPricingSeason]) -> VillaPricingSeason | None:
    """The season covering ``day``; the latest-starting one wins on overlap."""
    matching = [s for s in seasons if s.start_date <= day <= s.end_date]
    if not matching:
        return None
    return max(matching, key=lambda s: s.start_date)


def nightly_rate(
    villa: Villa,
    day: date,
    overrides: Mapping[date, VillaAvailability],
    seasons: Iterable[VillaPricingSeason],
) -> Decimal:
    entry = overrides.get(day)
    if entry is not None and entry.price_override is not None:
        return _money(entry.price_override)
    season = season_for(day, seasons)
    if season is not None:
        return _money(season.nightly_price)
    return _money(villa.base_price_per_night)


def minimum_stay(
    villa: Villa,
    check_in: date,
    overrides: Mapping[date, VillaAvailability],
    seasons: Iterable[VillaPricingSeason],
) -> int:
    entry = overrides.get(check_in)
    if entry is not None and entry.minimum_stay_override is not None:
        return entry.minimum_stay_override
    season = season_for(check_in, seasons)
    if season is not None:
        return season.minimum_stay_nights
    return villa.minimum_stay_nights


def compute_breakdown(
    villa: Villa,
    check_in: date,
    check_out: date,
    overrides: Mapping[date, VillaAvailability] | None = None,
    seasons: Iterable[VillaPricingSeason] = (),
    currency: str | None = None,
) -> dict:
    """Price a stay. ``total`` is the sum of every line, security deposit included."""
    overrides = overrides or {}
    seasons = list(seasons)
    nights = stay_nights(check_in, check_out)
    subtotal = sum((nightly_rate(villa, day, overrides, seasons) for day in nights), Decimal("0"))
    cleaning_fee = _money(villa.cleaning_fee)
    service_fee = _money(villa.service_fee)
    security_deposit = _money(villa.security_deposit)
    return {
        "check_in": check_in,
        "check_out": check_out,
        "nights": len(nights),
        "nightly_subtotal": _money(subtotal),
        "cleaning_fee": cleaning_fee,
        "service_fee": service_fee,
        "security_deposit": security_deposit,
        "total": _money(subtotal + cleaning_fee + service_fee + security_deposit),
        "currency": currency or settings.default_currency,
    }


async def load_calendar(
    db: AsyncSession,
    villa_id: uuid.UUID,
    start: date,
    end: date,
) -> tuple[dict[date, VillaAvailability], list[VillaPricingSeason]]:
    """Availability entries in ``[start, end)`` keyed by date, plus every overlapping season."""
    avail_result = await db.execute(
        select(VillaAvailability).where(
            VillaAvailability.villa_id == villa_id,
            VillaAvailability.date >= start,
            VillaAvailability.date < end,
        )
    )
    overrides = {entry.date: entry for entry in avail_result.scalars().all()}

    season_result = await db.execute(
        select(VillaPricingSeason).where(
            VillaPricingSeason.villa_id == villa_id,
            VillaPricingSeason.start_date < end,
            VillaPricingSeason.end_date >= start,
        )
    )
    return overrides, list(season_result.scalars().all())


async def quote(db: AsyncSession, villa: Villa, check_in: date, check_out: date) -> dict:
    """Price a stay at ``villa`` using its stored calendar and seasons."""
    overrides, seasons = await load_calendar(db, villa.id, check_in, check_out)
    return compute_breakdown(villa, check_in, check_out, overrides, seasons)


async def required_minimum_stay(db: AsyncSession, villa: Villa, check_in: date) -> int:
    overrides, seasons = await load_calendar(db, villa.id, check_in, check_in + timedelta(days=1))
    return minimum_stay(villa, check_in, overrides, seasons)
