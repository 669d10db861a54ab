from typing import ClassVar, FrozenSet, List, Literal, Optional

from pydantic import BaseModel, Field

from app.models.base import MODEL_CONFIG, DocumentModel, PartialDocumentModel


class Address(BaseModel):
    model_config = MODEL_CONFIG

    street1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None


class GeoPoint(BaseModel):
    """GeoJSON point; coordinates are [longitude, latitude]."""

    model_config = MODEL_CONFIG

    type: Literal["Point"] = "Point"
    coordinates: List[float]


class TheaterLocation(BaseModel):
    model_config = MODEL_CONFIG

    address: Optional[Address] = None
    geo: GeoPoint


class TheaterCreate(DocumentModel):
    theater_id: int = Field(alias="theaterId")
    location: TheaterLocation


class TheaterUpdate(PartialDocumentModel):
    required_fields: ClassVar[FrozenSet[str]] = frozenset({"theaterId", "location"})

    theater_id: Optional[int] = Field(default=None, alias="theaterId")
    location: Optional[TheaterLocation] = None
