from typing import ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel, Field

from app.models.base import MODEL_CONFIG, DocumentModel, PartialDocumentModel


class ImdbInfo(BaseModel):
    model_config = MODEL_CONFIG

    rating: Optional[float] = None
    votes: Optional[int] = None
    id: Optional[int] = None


class MovieCreate(DocumentModel):
    title: str
    plot: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    runtime: Optional[int] = None
    year: Optional[int] = None
    imdb: Optional[ImdbInfo] = None


class MovieUpdate(PartialDocumentModel):
    required_fields: ClassVar[FrozenSet[str]] = frozenset({"title"})

    title: Optional[str] = None
    plot: Optional[str] = None
    genres: Optional[List[str]] = None
    runtime: Optional[int] = None
    year: Optional[int] = None
    imdb: Optional[ImdbInfo] = None
