"""Departure schedule normalization.

Tours carry their departures in an ACF field called ``departure_schedule``,
authored by hand in the CMS. It arrives either as a JSON string or as an
already decoded object, and is frequently malformed, so every lookup here
is defaulted and the resolver never raises.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

SOLD_OUT = "sold_out"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _non_negative(value: Any) -> float:
    """Return *value* as a non-negative number, or 0 when it is not one."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, (int, float)):
        return 0
    try:
        number = float(value)
    except OverflowError:
        return 0
    if not math.isfinite(number) or number < 0:
        return 0
    return value if isinstance(value, float) else int(value)


def _as_tuple(value: Any) -> Tuple[Any, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return ()


def _text(value: Any) -> Optional[str]:
    """Non-blank string form of a free-form metadata value."""
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, float) and value and math.isfinite(value):
        return str(value)
    if isinstance(value, int) and not isinstance(value, bool) and value:
        try:
            return str(value)
        except ValueError:
            return None
    return None


def _positive_int(value: Any, default: int) -> int:
    """Parse a leading integer the way form input is usually written ("12 pax")."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, float):
        parsed = int(value) if math.isfinite(value) else 0
    elif isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        if not match:
            return default
        try:
            parsed = int(match.group(1))
        except ValueError:
            # more digits than int() accepts from text
            return default
    else:
        return default
    return parsed if parsed > 0 else default


class Departure(BaseModel):
    """One departure of a schedule, with every field defaulted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    date: str = ""
    status: Optional[str] = None
    available_seats: int = Field(0, alias="availableSeats")
    total_seats: int = Field(0, alias="totalSeats")
    price_per_person: float = Field(0, alias="pricePerPerson")
    pricing_tiers: Tuple[Any, ...] = Field((), alias="pricingTiers")
    child_with_bed: float = Field(0, alias="childWithBed")
    child_without_bed: float = Field(0, alias="childWithoutBed")
    extra_adult_same_room: float = Field(0, alias="extraAdultSameRoom")
    single_room_supplement: float = Field(0, alias="singleRoomSupplement")
    addons: Tuple[Any, ...] = ()

    @field_validator("date", mode="before")
    @classmethod
    def _date(cls, value: Any) -> str:
        return value.strip() if isinstance(value, str) else ""

    @field_validator("status", mode="before")
    @classmethod
    def _status(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("available_seats", "total_seats", mode="before")
    @classmethod
    def _seats(cls, value: Any) -> int:
        return int(_non_negative(value))

    @field_validator(
        "price_per_person",
        "child_with_bed",
        "child_without_bed",
        "extra_adult_same_room",
        "single_room_supplement",
        mode="before",
    )
    @classmethod
    def _amount(cls, value: Any) -> float:
        return _non_negative(value)

    @field_validator("pricing_tiers", "addons", mode="before")
    @classmethod
    def _sequence(cls, value: Any) -> Tuple[Any, ...]:
        return _as_tuple(value)

    @property
    def is_sold_out(self) -> bool:
        return self.status == SOLD_OUT


class ScheduleDefaults(BaseModel):
    """Fallback values used when a schedule's metadata is silent."""

    model_config = ConfigDict(frozen=True)

    location: str = "India"
    duration: str = "7 Days / 6 Nights"
    currency: str = "INR"
    min_travelers: int = 1
    max_travelers: int = 30

    @classmethod
    def from_settings(cls, settings) -> "ScheduleDefaults":
        return cls(
            location=settings.SCHEDULE_DEFAULT_LOCATION,
            duration=settings.SCHEDULE_DEFAULT_DURATION,
            currency=settings.SCHEDULE_DEFAULT_CURRENCY,
            min_travelers=settings.SCHEDULE_MIN_TRAVELERS,
            max_travelers=settings.SCHEDULE_MAX_TRAVELERS,
        )


class TourAvailability(BaseModel):
    """Bookable dates, seats and anchor pricing derived from a schedule."""

    model_config = ConfigDict(frozen=True)

    available_dates: Tuple[str, ...] = ()
    seats_available: int = 0
    price_per_person: float = 0
    pricing_tiers: Tuple[Any, ...] = ()
    child_with_bed: float = 0
    child_without_bed: float = 0
    extra_adult_same_room: float = 0
    single_room_supplement: float = 0
    addons: Tuple[Any, ...] = ()
    location: str = ""
    duration: str = ""
    currency: str = ""
    min_travelers: int = 1
    max_travelers: int = 30
    departures: Tuple[Departure, ...] = ()

    @property
    def departure_date(self) -> str:
        return self.available_dates[0] if self.available_dates else ""

    @property
    def has_departures(self) -> bool:
        return bool(self.available_dates)

    def find_departure(self, day: str) -> Optional[Departure]:
        """Available departure whose date starts with *day* (``YYYY-MM-DD``)."""
        for departure in self.departures:
            if departure.date and departure.date[:10] == day[:10]:
                return departure
        return None


class ScheduleResolver:
    """Turn a raw ``departure_schedule`` field into a :class:`TourAvailability`.

    The resolver holds no state besides its defaults; ``resolve`` is a pure
    function of its arguments and may be called concurrently.
    """

    def __init__(self, defaults: Optional[ScheduleDefaults] = None):
        self.defaults = defaults or ScheduleDefaults()

    def decode(self, raw: Any, *, tour_id: Any = None) -> Optional[Dict[str, Any]]:
        """Return the schedule as a mapping, or ``None`` if it is absent or unusable."""
        if raw is None or raw == "" or raw == b"":
            return None

        if isinstance(raw, (str, bytes, bytearray)):
            try:
                raw = json.loads(raw)
            except (ValueError, TypeError) as exc:
                logger.warning("Tour %s: failed to parse departure_schedule JSON: %s", tour_id, exc)
                return None

        if not isinstance(raw, Mapping):
            logger.warning(
                "Tour %s: departure_schedule is a %s, expected an object",
                tour_id, type(raw).__name__,
            )
            return None
        return dict(raw)

    def resolve(
        self,
        raw: Any,
        *,
        tour_id: Any = None,
        location_fallback: Optional[str] = None,
        duration_fallback: Optional[str] = None,
    ) -> TourAvailability:
        schedule = self.decode(raw, tour_id=tour_id)
        metadata = self._metadata(schedule)
        descriptive = self._describe(metadata, location_fallback, duration_fallback)

        departures = self._departures(schedule, tour_id)
        available = [d for d in departures if not d.is_sold_out]

        if not available:
            if schedule is not None:
                logger.warning("Tour %s: no available departures in departure_schedule", tour_id)
            return TourAvailability(**descriptive)

        anchor = available[0]
        logger.debug(
            "Tour %s: %d departures, %d available",
            tour_id, len(departures), len(available),
        )
        return TourAvailability(
            available_dates=tuple(d.date for d in available),
            seats_available=sum(d.available_seats for d in available),
            price_per_person=anchor.price_per_person,
            pricing_tiers=anchor.pricing_tiers,
            child_with_bed=anchor.child_with_bed,
            child_without_bed=anchor.child_without_bed,
            extra_adult_same_room=anchor.extra_adult_same_room,
            single_room_supplement=anchor.single_room_supplement,
            addons=anchor.addons,
            departures=tuple(available),
            **descriptive,
        )

    def _departures(self, schedule: Optional[Dict[str, Any]], tour_id: Any) -> List[Departure]:
        if schedule is None:
            return []
        entries = schedule.get("departures")
        if not isinstance(entries, list):
            return []

        departures = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                logger.warning("Tour %s: departure #%d is not an object; skipped", tour_id, index)
                continue
            try:
                departure = Departure.model_validate(dict(entry))
            except (PydanticValidationError, OverflowError) as exc:
                logger.warning("Tour %s: departure #%d is invalid; skipped: %s", tour_id, index, exc)
                continue
            if not departure.date:
                logger.warning("Tour %s: departure #%d has no date", tour_id, index)
            departures.append(departure)
        return departures

    @staticmethod
    def _metadata(schedule: Optional[Dict[str, Any]]) -> Mapping[str, Any]:
        metadata = schedule.get("metadata") if schedule else None
        return metadata if isinstance(metadata, Mapping) else {}

    def _describe(
        self,
        metadata: Mapping[str, Any],
        location_fallback: Optional[str],
        duration_fallback: Optional[str],
    ) -> Dict[str, Any]:
        defaults = self.defaults
        return {
            "location": _text(metadata.get("location")) or _text(location_fallback) or defaults.location,
            "duration": _text(metadata.get("duration")) or _text(duration_fallback) or defaults.duration,
            "currency": _text(metadata.get("currency")) or defaults.currency,
            "min_travelers": _positive_int(metadata.get("minTravelers"), defaults.min_travelers),
            "max_travelers": _positive_int(metadata.get("maxTravelers"), defaults.max_travelers),
        }
