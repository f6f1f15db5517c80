from typing import Optional

from fastapi import APIRouter, Query

from booking_api.api.v1.schemas.tour_schemas import TourListOut, TourDetailOut
from booking_api.deps import WordPressDep


router = APIRouter()


@router.get("", response_model=TourListOut)
async def list_tours(
    wordpress: WordPressDep,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100, alias="perPage"),
    search: Optional[str] = Query(None, description="Keyword search"),
    destination: Optional[str] = Query(None, description="Destination taxonomy slug"),
):
    """List tours, optionally by keyword or destination"""
    if search:
        tours = await wordpress.search_tours(search)
        return TourListOut(tours=tours, total=len(tours), total_pages=1)
    if destination:
        tours = await wordpress.get_tours_by_destination(destination)
        return TourListOut(tours=tours, total=len(tours), total_pages=1)

    result = await wordpress.get_all_tours(page=page, per_page=per_page)
    return TourListOut(tours=result.tours, total=result.total, total_pages=result.total_pages)


@router.get("/{tour_id}", response_model=TourDetailOut)
async def get_tour(tour_id: str, wordpress: WordPressDep):
    """Get a tour by WordPress post id or slug"""
    tour = await wordpress.get_tour(tour_id)
    return TourDetailOut(tour=tour)
