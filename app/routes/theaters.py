"""Theater endpoints: CRUD and nearby search."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.config.settings import Settings
from app.db.client import get_database, get_settings
from app.routes.outcomes import OperationSite, failure_response, success_response
from app.routes.resource_router import ResourceDefinition, add_crud_routes
from app.services.theater_service import TheaterService

router = APIRouter(prefix="/api/theaters", tags=["theaters"])


async def get_theater_service(
    db=Depends(get_database), settings: Settings = Depends(get_settings)
) -> TheaterService:
    return TheaterService(collection=db[settings.THEATERS_COLLECTION])


@router.get("/nearby", summary="Theaters within a radius of a point")
async def nearby_theaters(
    latitude: Optional[str] = Query(None),
    longitude: Optional[str] = Query(None),
    radius: Optional[str] = Query(None),
    unit: str = Query("km", description="'km' or 'miles'"),
    service: TheaterService = Depends(get_theater_service),
):
    try:
        result = await service.nearby(latitude=latitude, longitude=longitude, radius=radius, unit=unit)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(result)


add_crud_routes(
    router, ResourceDefinition(items_key="theaters", total_key="totalTheaters"), get_theater_service
)
