from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel

from app.models.base import MODEL_CONFIG, DocumentModel, PartialDocumentModel
from app.models.movie_models import ImdbInfo


class Awards(BaseModel):
    model_config = MODEL_CONFIG

    wins: Optional[int] = None
    nominations: Optional[int] = None
    text: Optional[str] = None


class TomatoesViewer(BaseModel):
    model_config = MODEL_CONFIG

    rating: Optional[float] = None
    numReviews: Optional[int] = None
    meter: Optional[int] = None


class Tomatoes(BaseModel):
    model_config = MODEL_CONFIG

    viewer: Optional[TomatoesViewer] = None
    dvd: Optional[datetime] = None
    lastUpdated: Optional[datetime] = None


class EmbeddedMovieFields(BaseModel):
    """Optional fields shared by create and update payloads."""

    model_config = MODEL_CONFIG

    plot: Optional[str] = None
    fullplot: Optional[str] = None
    genres: Optional[List[str]] = None
    runtime: Optional[int] = None
    rated: Optional[str] = None
    cast: Optional[List[str]] = None
    poster: Optional[str] = None
    languages: Optional[List[str]] = None
    released: Optional[datetime] = None
    directors: Optional[List[str]] = None
    writers: Optional[List[str]] = None
    awards: Optional[Awards] = None
    lastupdated: Optional[str] = None
    year: Optional[int] = None
    imdb: Optional[ImdbInfo] = None
    countries: Optional[List[str]] = None
    type: Optional[str] = None
    tomatoes: Optional[Tomatoes] = None
    num_mflix_comments: Optional[int] = None
    plot_embedding_openai: Optional[List[float]] = None


class EmbeddedMovieCreate(EmbeddedMovieFields, DocumentModel):
    title: str


class EmbeddedMovieUpdate(EmbeddedMovieFields, PartialDocumentModel):
    required_fields: ClassVar[FrozenSet[str]] = frozenset({"title"})

    title: Optional[str] = None
