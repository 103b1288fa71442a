"""Unit tests for nightly rates, minimum stays and price breakdowns."""

from datetime import date
from decimal import Decimal

from beachvillas.models.villa import Villa, VillaAvailability, VillaPricingSeason
from beachvillas.services.pricing import compute_breakdown, minimum_stay, nightly_rate, season_for, stay_nights


def _villa(**overrides) -> Villa:
    fields = {
        "base_price_per_night": Decimal("200.00"),
        "minimum_stay_nights": 2,
        "cleaning_fee": Decimal("50.00"),
        "service_fee": Decimal("25.00"),
        "security_deposit": Decimal("300.00"),
    }
    fields.update(overrides)
    return Villa(**fields)


def _season(start: date, end: date, price: str, minimum: int = 3, name: str = "High") -> VillaPricingSeason:
    return VillaPricingSeason(
        season_name=name,
        start_date=start,
        end_date=end,
        nightly_price=Decimal(price),
        minimum_stay_nights=minimum,
    )


class TestStayNights:
    def test_check_out_day_excluded(self):
        nights = stay_nights(date(2025, 7, 1), date(2025, 7, 4))
        assert nights == [date(2025, 7, 1), date(2025, 7, 2), date(2025, 7, 3)]

    def test_same_day_is_empty(self):
        assert stay_nights(date(2025, 7, 1), date(2025, 7, 1)) == []


class TestSeasonFor:
    def test_inclusive_bounds(self):
        season = _season(date(2025, 7, 1), date(2025, 7, 31), "300")
        assert season_for(date(2025, 7, 1), [season]) is season
        assert season_for(date(2025, 7, 31), [season]) is season
        assert season_for(date(2025, 8, 1), [season]) is None

    def test_latest_starting_season_wins(self):
        summer = _season(date(2025, 6, 1), date(2025, 8, 31), "300", name="Summer")
        festival = _season(date(2025, 7, 10), date(2025, 7, 20), "450", name="Festival")
        assert season_for(date(2025, 7, 15), [festival, summer]) is festival


class TestNightlyRate:
    def test_precedence_override_then_season_then_base(self):
        villa = _villa()
        season = _season(date(2025, 7, 1), date(2025, 7, 31), "300")
        overrides = {date(2025, 7, 2): VillaAvailability(date=date(2025, 7, 2), price_override=Decimal("500"))}

        assert nightly_rate(villa, date(2025, 7, 2), overrides, [season]) == Decimal("500.00")
        assert nightly_rate(villa, date(2025, 7, 3), overrides, [season]) == Decimal("300.00")
        assert nightly_rate(villa, date(2025, 8, 3), overrides, [season]) == Decimal("200.00")

    def test_blocked_entry_without_price_falls_through(self):
        villa = _villa()
        overrides = {date(2025, 7, 2): VillaAvailability(date=date(2025, 7, 2), is_available=False)}
        assert nightly_rate(villa, date(2025, 7, 2), overrides, []) == Decimal("200.00")


class TestMinimumStay:
    def test_precedence_on_check_in_date(self):
        villa = _villa(minimum_stay_nights=2)
        season = _season(date(2025, 7, 1), date(2025, 7, 31), "300", minimum=5)
        overrides = {date(2025, 7, 4): VillaAvailability(date=date(2025, 7, 4), minimum_stay_override=7)}

        assert minimum_stay(villa, date(2025, 7, 4), overrides, [season]) == 7
        assert minimum_stay(villa, date(2025, 7, 5), overrides, [season]) == 5
        assert minimum_stay(villa, date(2025, 9, 1), overrides, [season]) == 2


class TestComputeBreakdown:
    def test_total_includes_every_fee_and_deposit(self):
        breakdown = compute_breakdown(_villa(), date(2025, 9, 1), date(2025, 9, 4), currency="USD")
        assert breakdown["nights"] == 3
        assert breakdown["nightly_subtotal"] == Decimal("600.00")
        assert breakdown["total"] == Decimal("975.00")
        assert breakdown["currency"] == "USD"

    def test_mixed_rates_across_season_boundary(self):
        season = _season(date(2025, 7, 3), date(2025, 7, 10), "300")
        breakdown = compute_breakdown(_villa(), date(2025, 7, 1), date(2025, 7, 5), seasons=[season])
        # 2 nights at base, 2 in season
        assert breakdown["nightly_subtotal"] == Decimal("1000.00")
        assert breakdown["total"] == Decimal("1375.00")

    def test_amounts_rounded_to_cents(self):
        villa = _villa(base_price_per_night=Decimal("99.995"), cleaning_fee=0, service_fee=0, security_deposit=0)
        breakdown = compute_breakdown(villa, date(2025, 9, 1), date(2025, 9, 2))
        assert breakdown["nightly_subtotal"] == Decimal("100.00")
        assert breakdown["cleaning_fee"] == Decimal("0.00")
