from datetime import datetime, timezone
from typing import ClassVar, FrozenSet, Optional

from pydantic import Field

from app.models.base import DocumentModel, PartialDocumentModel, PyObjectId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CommentCreate(DocumentModel):
    name: str
    email: str
    movie_id: PyObjectId
    text: str
    date: datetime = Field(default_factory=_utcnow)


class CommentUpdate(PartialDocumentModel):
    required_fields: ClassVar[FrozenSet[str]] = frozenset({"name", "email", "movie_id", "text"})

    name: Optional[str] = None
    email: Optional[str] = None
    movie_id: Optional[PyObjectId] = None
    text: Optional[str] = None
    date: Optional[datetime] = None

