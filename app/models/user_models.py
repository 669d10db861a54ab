from typing import ClassVar, FrozenSet, Optional

from app.models.base import DocumentModel, PartialDocumentModel


class UserCreate(DocumentModel):
    name: str
    email: str
    password: str


class UserUpdate(PartialDocumentModel):
    required_fields: ClassVar[FrozenSet[str]] = frozenset({"name", "email", "password"})

    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
