from typing import Any, ClassVar, FrozenSet

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, GetCoreSchemaHandler, GetJsonSchemaHandler, model_validator
from pydantic_core import core_schema


class PyObjectId(ObjectId):
    """Custom ObjectId compatible with Pydantic v2."""

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type, handler: GetCoreSchemaHandler
    ):
        def validate(value):
            if isinstance(value, ObjectId):
                return value
            if ObjectId.is_valid(value):
                return ObjectId(value)
            raise ValueError("Invalid ObjectId")

        return core_schema.no_info_after_validator_function(
            validate,
            core_schema.union_schema(
                [core_schema.is_instance_schema(ObjectId), core_schema.str_schema()]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: str(value), when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema_obj, handler: GetJsonSchemaHandler
    ):
        json_schema = handler(core_schema_obj)
        json_schema.update(type="string")
        return json_schema


# Documents are schemaless in MongoDB: unknown fields are kept as sent.
MODEL_CONFIG = ConfigDict(populate_by_name=True, extra="allow", arbitrary_types_allowed=True)


class DocumentModel(BaseModel):
    """Validated shape of a document about to be inserted."""

    model_config = MODEL_CONFIG

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PartialDocumentModel(BaseModel):
    """
    Validated shape of a partial update.

    Only the fields present in the payload end up in ``$set``. Fields listed in
    ``required_fields`` may be omitted but cannot be cleared with ``null``.
    """

    model_config = MODEL_CONFIG

    required_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def _reject_cleared_required_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            cleared = sorted(name for name in cls.required_fields if name in data and data[name] is None)
            if cleared:
                raise ValueError(f"Path(s) {', '.join(cleared)} are required and cannot be null")
        return data

    def to_update(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True)
