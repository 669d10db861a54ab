"""
Theater service: CRUD plus nearby search over the 2dsphere index on
``location.geo``.
"""
from typing import Any, Dict, List, Optional

from app.models.theater_models import TheaterCreate, TheaterUpdate
from app.services.base import InvalidInputError, parse_leading_float
from app.services.resource_service import ResourceService
from app.utils.logger import get_logger

logger = get_logger(__name__)

METERS_PER_MILE = 1609.34
METERS_PER_KM = 1000


class TheaterService(ResourceService):
    """Service for the theaters collection."""

    def __init__(self, *, collection):
        super().__init__(
            collection=collection,
            resource_name="Theater",
            create_model=TheaterCreate,
            update_model=TheaterUpdate,
        )

    async def nearby(
        self,
        *,
        latitude: Optional[str],
        longitude: Optional[str],
        radius: Optional[str],
        unit: str = "km",
    ) -> Dict[str, Any]:
        """
        Theaters within ``radius`` of a point, nearest first.

        Distances are reported in ``unit`` ("miles", anything else is read as
        kilometres) rounded to two decimals.

        Raises:
            InvalidInputError: If a coordinate or the radius is missing or out of range
        """
        if not latitude or not longitude or not radius:
            raise InvalidInputError("Latitude, longitude, and radius are required parameters")

        lat = parse_leading_float(latitude)
        lng = parse_leading_float(longitude)
        rad = parse_leading_float(radius)
        if lat is None or lng is None or rad is None:
            raise InvalidInputError("Latitude, longitude, and radius must be valid numbers")
        if lat < -90 or lat > 90 or lng < -180 or lng > 180:
            raise InvalidInputError("Invalid latitude or longitude values")
        if rad <= 0:
            raise InvalidInputError("Radius must be a positive number")

        meters_per_unit = METERS_PER_MILE if unit == "miles" else METERS_PER_KM

        pipeline: List[Dict[str, Any]] = [
            {
                "$geoNear": {
                    "near": {"type": "Point", "coordinates": [lng, lat]},
                    "key": "location.geo",
                    "distanceField": "distance",
                    "maxDistance": rad * meters_per_unit,
                    "spherical": True,
                }
            },
            {"$project": {"theaterId": 1, "location": 1, "distance": 1}},
        ]
        docs = await self._collection.aggregate(pipeline).to_list(length=None)

        theaters = [
            {**doc, "distance": round(doc["distance"] / meters_per_unit, 2), "unit": unit}
            for doc in docs
        ]
        logger.info(f"Found {len(theaters)} theaters within {rad} {unit} of ({lat}, {lng})")
        return {"theaters": theaters, "count": len(theaters)}
