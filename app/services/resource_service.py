"""
Generic CRUD service over one MongoDB collection.
Every resource (users, movies, theaters, comments, embedded movies) is an
instance or a subclass of ResourceService.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from bson import ObjectId
from pymongo import ReturnDocument

from app.models.base import DocumentModel, PartialDocumentModel
from app.services.base import NotFoundError, PageRequest
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Keys the store owns; never taken from a request body.
READ_ONLY_FIELDS = ("_id", "__v")


class ResourceService:
    """CRUD operations plus paging for a single resource collection."""

    # Sort applied to list queries, e.g. [("date", -1)]. None keeps natural order.
    list_sort: Optional[Sequence[Tuple[str, int]]] = None

    def __init__(
        self,
        *,
        collection,
        resource_name: str,
        create_model: Type[DocumentModel],
        update_model: Type[PartialDocumentModel],
    ):
        self._collection = collection
        self._resource_name = resource_name
        self._create_model = create_model
        self._update_model = update_model

    @property
    def resource_name(self) -> str:
        return self._resource_name

    @property
    def not_found_message(self) -> str:
        return f"{self._resource_name} not found"

    async def list_page(
        self, page_request: PageRequest, *, query: Optional[Mapping[str, Any]] = None
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Fetch one page of documents and the total matching count.

        Args:
            page_request: Resolved page window
            query: Optional MongoDB filter

        Returns:
            Tuple of (documents on this page, total count)
        """
        query = dict(query or {})
        cursor = self._collection.find(query)
        if self.list_sort:
            cursor = cursor.sort(list(self.list_sort))
        cursor = cursor.skip(page_request.skip).limit(page_request.limit)
        docs = await cursor.to_list(length=None)
        total = await self._collection.count_documents(query)

        logger.debug(
            f"Listed {len(docs)} {self._resource_name} records "
            f"(page={page_request.page}, limit={page_request.limit}, total={total})"
        )
        return await self._present(docs), total

    async def get(self, record_id: str) -> Dict[str, Any]:
        """
        Retrieve one document by its identifier.

        Raises:
            NotFoundError: If no document has this identifier
            bson.errors.InvalidId: If the identifier is not a valid ObjectId
        """
        doc = await self._collection.find_one({"_id": ObjectId(record_id)})
        if not doc:
            logger.warning(f"{self._resource_name} not found: {record_id}")
            raise NotFoundError(self.not_found_message)
        return (await self._present([doc]))[0]

    async def create(self, payload: Any) -> Dict[str, Any]:
        """Validate and insert a new document, returning it as stored."""
        document = self._create_model.model_validate(self._clean_payload(payload)).to_document()
        result = await self._collection.insert_one(document)
        document["_id"] = result.inserted_id

        logger.info(f"Created {self._resource_name}: {result.inserted_id}")
        return (await self._present([document]))[0]

    async def update(self, record_id: str, payload: Any) -> Dict[str, Any]:
        """
        Apply a partial update and return the post-update document.

        Only the supplied fields are validated and written.

        Raises:
            NotFoundError: If no document has this identifier
        """
        object_id = ObjectId(record_id)
        changes = self._update_model.model_validate(self._clean_payload(payload)).to_update()

        if changes:
            doc = await self._collection.find_one_and_update(
                {"_id": object_id},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        else:
            doc = await self._collection.find_one({"_id": object_id})

        if not doc:
            logger.warning(f"{self._resource_name} not found for update: {record_id}")
            raise NotFoundError(self.not_found_message)

        logger.info(f"Updated {self._resource_name}: {record_id} ({', '.join(changes) or 'no changes'})")
        return (await self._present([doc]))[0]

    async def delete(self, record_id: str) -> Dict[str, Any]:
        """
        Delete one document by its identifier.

        Raises:
            NotFoundError: If no document has this identifier
        """
        doc = await self._collection.find_one_and_delete({"_id": ObjectId(record_id)})
        if not doc:
            logger.warning(f"{self._resource_name} not found for delete: {record_id}")
            raise NotFoundError(self.not_found_message)

        logger.info(f"Deleted {self._resource_name}: {record_id}")
        return doc

    async def _present(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Hook for subclasses that enrich documents before they are returned."""
        return docs

    @staticmethod
    def _clean_payload(payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValueError("Request body must be a JSON object")
        return {key: value for key, value in payload.items() if key not in READ_ONLY_FIELDS}
