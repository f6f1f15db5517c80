from typing import Optional, List, Dict, Any

from .base_schemas import CamelModel


class TourOut(CamelModel):
    """Tour as shown on the site, availability already resolved"""
    id: str
    slug: Optional[str] = None
    name: str
    short_description: str = ""
    description: str = ""
    itinerary: Any = None

    featured_image: str
    gallery_images: List[str] = []
    thumbnail_image: Optional[str] = None

    location: str
    destinations: List[str] = []
    duration: str

    price_per_person: float = 0
    price_adult: float = 0
    price_child: float = 0  # deprecated, pricing tiers carry child prices
    child_with_bed: float = 0
    child_without_bed: float = 0
    extra_adult_same_room: float = 0
    single_room_supplement: float = 0
    pricing_tiers: List[Any] = []
    currency: str

    available_dates: List[str] = []
    departure_date: str = ""
    departure_schedule: Optional[Dict[str, Any]] = None
    min_travelers: int
    max_travelers: int
    seats_available: int = 0
    booking_deadline: int

    pickup_location: str
    inclusions: List[Any] = []
    exclusions: List[Any] = []
    addons: List[Any] = []

    code: str
    status: Optional[str] = None
    created_at: Optional[str] = None
    modified_at: Optional[str] = None
    custom_fields: Dict[str, Any] = {}


class TourListOut(CamelModel):
    success: bool = True
    tours: List[TourOut]
    total: int
    total_pages: int


class TourDetailOut(CamelModel):
    success: bool = True
    tour: TourOut
