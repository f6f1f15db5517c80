"""WordPress (ACF) tour content client."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import Settings, get_settings
from ..core.exceptions import ExternalServiceError, NotFoundError
from .schedule_resolver import ScheduleDefaults, ScheduleResolver

logger = logging.getLogger(__name__)

ITINERARY_ENDPOINT = "/wp/v2/itinerary"
UPDATE_SEATS_ENDPOINT = "/immersive-trips/v1/update-seats"
DEFAULT_FEATURED_IMAGE = "https://images.unsplash.com/photo-1506905925346-21bda4d32df4?w=800"
DEFAULT_PICKUP_LOCATION = "Hotel Pickup Available"
BOOKING_DEADLINE_DAYS = 7

_TAG_RE = re.compile(r"<[^>]*>")


@dataclass
class TourPage:
    tours: List[Dict[str, Any]] = field(default_factory=list)
    total: int = 0
    total_pages: int = 0


def _header_int(headers: httpx.Headers, name: str) -> int:
    try:
        return int(headers.get(name, 0))
    except (TypeError, ValueError):
        return 0


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list_or_empty(value: Any) -> list:
    return value if isinstance(value, list) else []


def _text_or_none(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value.strip() else None


def _rendered(wp_tour: Dict[str, Any], key: str) -> Optional[str]:
    """``title``/``excerpt`` as ``{"rendered": ...}``, or plain text from some plugins"""
    value = wp_tour.get(key)
    if isinstance(value, dict):
        value = value.get("rendered")
    return value if isinstance(value, str) else None


def _featured_image(wp_tour: Dict[str, Any]) -> str:
    media_list = _list_or_empty(_mapping(wp_tour.get("_embedded")).get("wp:featuredmedia"))
    if not media_list or not isinstance(media_list[0], dict):
        return DEFAULT_FEATURED_IMAGE
    media = media_list[0]
    large = _mapping(_mapping(_mapping(media.get("media_details")).get("sizes")).get("large"))
    return media.get("source_url") or large.get("source_url") or DEFAULT_FEATURED_IMAGE


def _destinations(wp_tour: Dict[str, Any]) -> List[str]:
    term_groups = _list_or_empty(_mapping(wp_tour.get("_embedded")).get("wp:term"))
    names = []
    for group in term_groups:
        for term in group if isinstance(group, list) else [group]:
            if isinstance(term, dict) and term.get("taxonomy") == "destinations":
                names.append(term.get("name"))
    return [n for n in names if isinstance(n, str) and n]


def format_tour(wp_tour: Dict[str, Any], resolver: ScheduleResolver) -> Dict[str, Any]:
    """Map a WordPress itinerary post onto the tour shape used by the site."""
    acf = _mapping(wp_tour.get("acf"))
    tour_id = wp_tour.get("id")
    title = _rendered(wp_tour, "title")

    featured_image = _featured_image(wp_tour)
    gallery_images = [img["url"] for img in _list_or_empty(acf.get("gallery"))
                      if isinstance(img, dict) and img.get("url")]
    destinations = _destinations(wp_tour)

    schedule = resolver.decode(acf.get("departure_schedule"), tour_id=tour_id)
    availability = resolver.resolve(
        schedule,
        tour_id=tour_id,
        location_fallback=", ".join(destinations) or acf.get("location"),
        duration_fallback=acf.get("duration") or title,
    )
    if schedule is None:
        logger.warning("Tour %s: no departure_schedule; tour will show no dates", tour_id)
    if not availability.pricing_tiers:
        logger.warning("Tour %s: no pricingTiers in departure_schedule; pricing will not work", tour_id)

    excerpt = _rendered(wp_tour, "excerpt") or ""
    short_description = _text_or_none(acf.get("short_description")) or _TAG_RE.sub("", excerpt)[:200]

    return {
        "id": str(tour_id),
        "slug": wp_tour.get("slug"),
        "name": title or "Untitled Tour",
        "short_description": short_description,
        "description": "",
        "itinerary": acf.get("itinerary") or acf.get("day_by_day_itinerary") or [],

        "featured_image": featured_image,
        "gallery_images": gallery_images,
        "thumbnail_image": acf.get("thumbnail") or featured_image,

        "location": availability.location,
        "destinations": destinations,
        "duration": availability.duration,

        "price_per_person": availability.price_per_person,
        "price_adult": availability.price_per_person,
        "price_child": 0,
        "child_with_bed": availability.child_with_bed,
        "child_without_bed": availability.child_without_bed,
        "extra_adult_same_room": availability.extra_adult_same_room,
        "single_room_supplement": availability.single_room_supplement,
        "pricing_tiers": list(availability.pricing_tiers),
        "currency": availability.currency,

        "available_dates": list(availability.available_dates),
        "departure_date": availability.departure_date,
        "departure_schedule": schedule,
        "min_travelers": availability.min_travelers,
        "max_travelers": availability.max_travelers,
        "seats_available": availability.seats_available,
        "booking_deadline": BOOKING_DEADLINE_DAYS,

        "pickup_location": acf.get("pickup_location") or acf.get("meeting_point") or DEFAULT_PICKUP_LOCATION,
        "inclusions": _list_or_empty(acf.get("inclusions") or acf.get("whats_included")),
        "exclusions": _list_or_empty(acf.get("exclusions") or acf.get("whats_excluded")),
        "addons": list(availability.addons),

        "code": acf.get("tour_code") or f"TOUR-{tour_id}",
        "status": wp_tour.get("status"),
        "created_at": wp_tour.get("date"),
        "modified_at": wp_tour.get("modified"),
        "custom_fields": acf,

        "availability": availability,
    }


def _json(response: httpx.Response, action: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        logger.error("WordPress sent a non-JSON body while trying to %s: %s", action, exc)
        raise ExternalServiceError("wordpress", f"Failed to {action}") from exc


class WordPressService:
    """Async client for the itinerary post type exposed by the WordPress REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        resolver: Optional[ScheduleResolver] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.resolver = resolver or ScheduleResolver(ScheduleDefaults.from_settings(self.settings))
        self._transport = transport

    def _client(self, timeout: Optional[float] = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.WORDPRESS_API_URL,
            timeout=timeout or self.settings.WORDPRESS_API_TIMEOUT,
            transport=self._transport,
        )

    async def _get(self, path: str, params: Dict[str, Any], **kwargs) -> httpx.Response:
        async with self._client() as client:
            response = await client.get(path, params=params, **kwargs)
            response.raise_for_status()
            return response

    def _format_posts(self, data: Any, action: str) -> List[Dict[str, Any]]:
        if not isinstance(data, list):
            logger.error("WordPress answered %s with a %s, expected a list", action, type(data).__name__)
            raise ExternalServiceError("wordpress", f"Failed to {action}")
        posts = [post for post in data if isinstance(post, dict)]
        if len(posts) < len(data):
            logger.warning("Skipped %d non-object entries while trying to %s", len(data) - len(posts), action)
        return [format_tour(post, self.resolver) for post in posts]

    async def _fetch_list(self, params: Dict[str, Any], action: str) -> List[Dict[str, Any]]:
        try:
            response = await self._get(ITINERARY_ENDPOINT, {"_embed": "true", "acf_format": "standard", **params})
        except httpx.HTTPError as exc:
            logger.error("Error %s from WordPress: %s", action, exc)
            raise ExternalServiceError("wordpress", f"Failed to {action}") from exc
        return self._format_posts(_json(response, action), action)

    async def get_all_tours(self, page: int = 1, per_page: int = 20) -> TourPage:
        """Fetch a page of tours"""
        try:
            response = await self._get(
                ITINERARY_ENDPOINT,
                {"per_page": per_page, "page": page, "_embed": "true", "acf_format": "standard"},
            )
        except httpx.HTTPError as exc:
            logger.error("Error fetching tours from WordPress: %s", exc)
            raise ExternalServiceError("wordpress", "Failed to fetch tours from WordPress") from exc

        return TourPage(
            tours=self._format_posts(_json(response, "fetch tours"), "fetch tours"),
            total=_header_int(response.headers, "x-wp-total"),
            total_pages=_header_int(response.headers, "x-wp-totalpages"),
        )

    async def get_tour(self, id_or_slug: str) -> Dict[str, Any]:
        """Fetch a single tour by numeric id or slug, bypassing any caches."""
        id_or_slug = str(id_or_slug)
        if id_or_slug.isdigit():
            path, params = f"{ITINERARY_ENDPOINT}/{id_or_slug}", {}
        else:
            path, params = ITINERARY_ENDPOINT, {"slug": id_or_slug}
        params.update({"_embed": "true", "acf_format": "standard", "_": int(time.time() * 1000)})

        try:
            response = await self._get(
                path, params, headers={"Cache-Control": "no-cache", "Pragma": "no-cache"}
            )
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise NotFoundError("Tour", id_or_slug) from exc
            logger.error("Error fetching tour %s from WordPress: %s", id_or_slug, exc)
            raise ExternalServiceError("wordpress", "Failed to fetch tour details") from exc
        except httpx.HTTPError as exc:
            logger.error("Error fetching tour %s from WordPress: %s", id_or_slug, exc)
            raise ExternalServiceError("wordpress", "Failed to fetch tour details") from exc

        data = _json(response, "fetch tour details")
        tour_data = (data[0] if data else None) if isinstance(data, list) else data
        if not tour_data:
            raise NotFoundError("Tour", id_or_slug)
        if not isinstance(tour_data, dict):
            logger.error("WordPress returned a %s for tour %s", type(tour_data).__name__, id_or_slug)
            raise ExternalServiceError("wordpress", "Failed to fetch tour details")
        return format_tour(tour_data, self.resolver)

    async def search_tours(self, keyword: str) -> List[Dict[str, Any]]:
        return await self._fetch_list({"search": keyword, "per_page": 50}, "search tours")

    async def get_tours_by_destination(self, destination_slug: str) -> List[Dict[str, Any]]:
        return await self._fetch_list(
            {"destinations": destination_slug, "per_page": 50}, "fetch tours by destination"
        )

    async def update_seats(self, tour_id: str, departure_date: str, guests: int) -> None:
        """Ask the WordPress plugin to decrement seats for a departure."""
        async with self._client(timeout=5.0) as client:
            response = await client.post(
                UPDATE_SEATS_ENDPOINT,
                json={"tourId": tour_id, "departureDate": departure_date, "guests": guests},
                headers={"X-API-Key": self.settings.WORDPRESS_API_KEY},
            )
            response.raise_for_status()
