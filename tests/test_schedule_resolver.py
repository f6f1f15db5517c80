"""Unit tests for departure schedule normalization."""

import json
import logging

import pytest

from booking_api.services.schedule_resolver import (
    ScheduleDefaults,
    ScheduleResolver,
    TourAvailability,
)


@pytest.fixture
def resolver() -> ScheduleResolver:
    return ScheduleResolver(ScheduleDefaults())


def _defaults(resolver: ScheduleResolver) -> TourAvailability:
    return resolver.resolve(None)


class TestDefaults:
    """Absent, empty and malformed schedules all degrade to the default value."""

    @pytest.mark.parametrize(
        "raw",
        [None, "", {}, {"departures": []}, {"departures": "soon"}, {"metadata": {}}, [], "[1, 2]", 42],
    )
    def test_unusable_input_gives_defaults(self, resolver, raw) -> None:
        result = resolver.resolve(raw)

        assert result.available_dates == ()
        assert result.seats_available == 0
        assert result.price_per_person == 0
        assert result.pricing_tiers == ()
        assert result.addons == ()
        assert result.departure_date == ""
        assert result == _defaults(resolver)

    def test_malformed_json_does_not_raise(self, resolver, caplog) -> None:
        with caplog.at_level(logging.WARNING):
            result = resolver.resolve("{not valid json", tour_id=7)

        assert result == _defaults(resolver)
        assert "Tour 7" in caplog.text

    def test_default_descriptive_fields(self, resolver) -> None:
        result = _defaults(resolver)

        assert result.location == "India"
        assert result.duration == "7 Days / 6 Nights"
        assert result.currency == "INR"
        assert result.min_travelers == 1
        assert result.max_travelers == 30

    def test_all_sold_out_keeps_pricing_empty(self, resolver) -> None:
        raw = {"departures": [{"date": "2025-05-01", "status": "sold_out", "pricePerPerson": 900,
                               "pricingTiers": [{"price": 900}]}]}

        result = resolver.resolve(raw)

        assert result.available_dates == ()
        assert result.seats_available == 0
        assert result.price_per_person == 0
        assert result.pricing_tiers == ()


class TestDepartures:
    def test_sold_out_dates_are_excluded(self, resolver, schedule) -> None:
        result = resolver.resolve(schedule)

        assert result.available_dates == ("2025-07-01", "2025-08-01")
        assert "2025-06-01" not in result.available_dates
        assert result.departure_date == "2025-07-01"

    def test_anchor_is_first_available_departure(self, resolver) -> None:
        raw = {"departures": [
            {"date": "2025-05-01", "status": "sold_out", "pricePerPerson": 100},
            {"date": "2025-05-08", "status": "open", "pricePerPerson": 200},
            {"date": "2025-05-15", "status": "open", "pricePerPerson": 300},
        ]}

        assert resolver.resolve(raw).price_per_person == 200

    def test_seat_aggregation_skips_sold_out(self, resolver) -> None:
        raw = {"departures": [
            {"status": "open", "availableSeats": 3},
            {"status": "sold_out", "availableSeats": 10},
            {"status": "open", "availableSeats": 5},
        ]}

        result = resolver.resolve(raw)

        assert result.seats_available == 8
        assert len(result.available_dates) == 2

    def test_dates_match_seat_contributing_departures(self, resolver, schedule) -> None:
        schedule["departures"].append({"status": "waitlist", "availableSeats": 2})

        result = resolver.resolve(schedule)

        assert len(result.available_dates) == len(result.departures)
        assert result.seats_available == sum(d.available_seats for d in result.departures)

    def test_anchor_supplements_and_addons(self, resolver, schedule) -> None:
        result = resolver.resolve(schedule)

        assert result.price_per_person == 32000
        assert [t["name"] for t in result.pricing_tiers] == ["Twin sharing", "Triple sharing"]
        assert result.child_with_bed == 18000
        assert result.child_without_bed == 12000
        assert result.extra_adult_same_room == 26000
        assert result.single_room_supplement == 8000
        assert result.addons == ({"name": "Airport transfer", "price": 1500},)

    def test_empty_anchor_tiers_do_not_fall_back(self, resolver) -> None:
        raw = {"departures": [
            {"date": "2025-05-01", "pricePerPerson": 100, "pricingTiers": []},
            {"date": "2025-05-08", "pricePerPerson": 200, "pricingTiers": [{"price": 200}]},
        ]}

        assert resolver.resolve(raw).pricing_tiers == ()

    def test_garbage_values_become_zero(self, resolver) -> None:
        raw = {"departures": [
            {"date": "2025-05-01", "availableSeats": "lots", "pricePerPerson": -5,
             "childWithBed": "4500", "pricingTiers": "none", "addons": {"x": 1}},
            {"date": "2025-05-08", "availableSeats": True},
        ]}

        result = resolver.resolve(raw)

        assert result.seats_available == 0
        assert result.price_per_person == 0
        assert result.child_with_bed == 4500
        assert result.pricing_tiers == ()
        assert result.addons == ()

    def test_oversized_numbers_become_zero(self, resolver) -> None:
        """Integers too large for a float are treated like any other unusable number."""
        text = '{"departures":[{"date":"2025-05-01","pricePerPerson":1' + "0" * 400 + ',"availableSeats":4}]}'
        raw = {"departures": [{"date": "2025-05-08", "availableSeats": 10 ** 400, "childWithBed": 10 ** 400}]}

        from_text = resolver.resolve(text)
        from_mapping = resolver.resolve(raw)

        assert from_text.available_dates == ("2025-05-01",)
        assert from_text.price_per_person == 0
        assert from_text.seats_available == 4
        assert from_mapping.available_dates == ("2025-05-08",)
        assert from_mapping.seats_available == 0
        assert from_mapping.child_with_bed == 0

    def test_non_object_entries_are_skipped(self, resolver) -> None:
        raw = {"departures": ["2025-05-01", None, {"date": "2025-05-08", "availableSeats": 4}]}

        result = resolver.resolve(raw)

        assert result.available_dates == ("2025-05-08",)
        assert result.seats_available == 4

    def test_find_departure_by_day(self, resolver, schedule) -> None:
        result = resolver.resolve(schedule)

        assert result.find_departure("2025-07-01").available_seats == 6
        assert result.find_departure("2025-06-01") is None
        assert result.find_departure("2025-09-01") is None


class TestInputForms:
    def test_text_and_structured_input_are_equivalent(self, resolver) -> None:
        text = '{"departures":[{"date":"2025-05-01","status":"open","availableSeats":4}]}'

        assert resolver.resolve(text) == resolver.resolve(json.loads(text))

    def test_resolving_twice_is_idempotent(self, resolver, schedule) -> None:
        raw = json.dumps(schedule)

        assert resolver.resolve(raw) == resolver.resolve(raw)

    def test_bytes_are_decoded(self, resolver, schedule) -> None:
        assert resolver.resolve(json.dumps(schedule).encode()) == resolver.resolve(schedule)


class TestMetadata:
    def test_metadata_location_beats_fallback(self, resolver) -> None:
        raw = {"departures": [], "metadata": {"location": "Leh"}}

        result = resolver.resolve(raw, location_fallback="Ladakh, Kashmir")

        assert result.location == "Leh"

    def test_fallbacks_beat_defaults(self, resolver) -> None:
        result = resolver.resolve(None, location_fallback="Spiti", duration_fallback="5 Days")

        assert result.location == "Spiti"
        assert result.duration == "5 Days"

    def test_blank_metadata_falls_through(self, resolver) -> None:
        raw = {"metadata": {"location": "  ", "currency": ""}}

        result = resolver.resolve(raw, location_fallback="Spiti")

        assert result.location == "Spiti"
        assert result.currency == "INR"

    @pytest.mark.parametrize(
        "value, expected",
        [("12", 12), (" 8 pax", 8), (20, 20), (6.0, 6), ("many", 30), ("0", 30), (-4, 30), (None, 30)],
    )
    def test_max_travelers_parse(self, resolver, value, expected) -> None:
        raw = {"metadata": {"maxTravelers": value}}

        assert resolver.resolve(raw).max_travelers == expected

    def test_defaults_come_from_configuration(self) -> None:
        resolver = ScheduleResolver(ScheduleDefaults(location="Bhutan", currency="USD", max_travelers=16))

        result = resolver.resolve(None)

        assert result.location == "Bhutan"
        assert result.currency == "USD"
        assert result.max_travelers == 16

    def test_defaults_from_settings(self, settings) -> None:
        settings.SCHEDULE_DEFAULT_LOCATION = "Nepal"
        settings.SCHEDULE_MAX_TRAVELERS = 18

        defaults = ScheduleDefaults.from_settings(settings)

        assert defaults.location == "Nepal"
        assert defaults.max_travelers == 18
