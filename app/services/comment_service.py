"""
Comment service. Comments reference a movie through ``movie_id``; every
comment returned by this service carries the referenced movie's title and
year in place of the bare identifier.
"""
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from bson import ObjectId
from pymongo import ReturnDocument

from app.models.comment_models import CommentCreate, CommentUpdate
from app.services.base import InvalidInputError, NotFoundError, PageRequest
from app.services.resource_service import ResourceService
from app.utils.logger import get_logger

logger = get_logger(__name__)

MOVIE_SUMMARY_FIELDS = {"title": 1, "year": 1}
MOVIE_DETAIL_FIELDS = {"title": 1, "year": 1, "genres": 1}
VOTE_COUNTERS = {"helpful": "helpful_votes", "not_helpful": "not_helpful_votes"}


def parse_date(raw: str) -> datetime:
    """ISO-8601 date or datetime; a trailing "Z" is read as UTC."""
    return datetime.fromisoformat(raw.replace("Z", "+00:00"))


def engagement_level(total_comments: int) -> str:
    if total_comments > 100:
        return "High"
    if total_comments > 50:
        return "Medium"
    return "Low"


class CommentService(ResourceService):
    """Service for the comments collection."""

    list_sort = [("date", -1)]

    def __init__(self, *, collection, movies_collection):
        super().__init__(
            collection=collection,
            resource_name="Comment",
            create_model=CommentCreate,
            update_model=CommentUpdate,
        )
        self._movies = movies_collection

    async def list_by_movie(self, movie_id: str) -> List[Dict[str, Any]]:
        cursor = self._collection.find({"movie_id": ObjectId(movie_id)}).sort([("date", -1)])
        docs = await cursor.to_list(length=None)
        return await self._present(docs)

    async def user_history(self, email: str, page_request: PageRequest) -> Tuple[List[Dict[str, Any]], int]:
        query = {"email": email}
        cursor = self._collection.find(query).sort(list(self.list_sort))
        docs = await cursor.skip(page_request.skip).limit(page_request.limit).to_list(length=None)
        total = await self._collection.count_documents(query)
        docs = await self._populate(docs, MOVIE_DETAIL_FIELDS)
        logger.info(f"Comment history for {email}: {total} comments")
        return docs, total

    async def recent_by_genre(self, genre: str, page_request: PageRequest) -> Tuple[List[Dict[str, Any]], int]:
        """Newest comments on movies of one genre, each with a movie summary."""
        pipeline = [
            {
                "$lookup": {
                    "from": self._movies.name,
                    "localField": "movie_id",
                    "foreignField": "_id",
                    "as": "movie",
                }
            },
            {"$unwind": "$movie"},
            {"$match": {"movie.genres": genre}},
            {"$sort": {"date": -1}},
            {"$skip": page_request.skip},
            {"$limit": page_request.limit},
            {
                "$project": {
                    "name": 1,
                    "email": 1,
                    "text": 1,
                    "date": 1,
                    "helpful_votes": 1,
                    "not_helpful_votes": 1,
                    "movie": {"title": "$movie.title", "year": "$movie.year", "genres": "$movie.genres"},
                }
            },
        ]
        docs = await self._collection.aggregate(pipeline).to_list(length=None)

        movie_ids = await self._movies.distinct("_id", {"genres": genre})
        total = await self._collection.count_documents({"movie_id": {"$in": movie_ids}})
        return docs, total

    async def stats_for_movie(
        self, movie_id: str, *, start_date: Optional[str] = None, end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Comment count and dated comment list for one movie.

        ``averageRating`` averages a per-comment ``rating`` and is null when
        the comments carry none.

        Raises:
            bson.errors.InvalidId: If movie_id is not a valid ObjectId
            ValueError: If a date bound is not ISO-8601
        """
        object_id = ObjectId(movie_id)
        match: Dict[str, Any] = {"movie_id": object_id}
        if start_date or end_date:
            match["date"] = {}
            if start_date:
                match["date"]["$gte"] = parse_date(start_date)
            if end_date:
                match["date"]["$lte"] = parse_date(end_date)

        pipeline = [
            {"$match": match},
            {
                "$group": {
                    "_id": "$movie_id",
                    "totalComments": {"$sum": 1},
                    "averageRating": {"$avg": "$rating"},
                    "commentsByDate": {"$push": {"date": "$date", "rating": "$rating", "text": "$text"}},
                }
            },
            {
                "$project": {
                    "_id": 0,
                    "movie_id": "$_id",
                    "totalComments": 1,
                    "averageRating": {"$round": ["$averageRating", 2]},
                    "commentsByDate": 1,
                }
            },
        ]
        stats = await self._collection.aggregate(pipeline).to_list(length=None)
        movie = await self._movies.find_one({"_id": object_id}, MOVIE_DETAIL_FIELDS)

        return {
            "movie": movie,
            "stats": stats[0] if stats else {"totalComments": 0, "averageRating": None, "commentsByDate": []},
        }

    async def top_reviewers(self, *, limit: int) -> List[Dict[str, Any]]:
        pipeline = [
            {"$group": {"_id": "$email", "commentCount": {"$sum": 1}}},
            {"$sort": {"commentCount": -1}},
            {"$limit": limit},
            {"$project": {"_id": 0, "email": "$_id", "commentCount": 1}},
        ]
        return await self._collection.aggregate(pipeline).to_list(length=None)

    async def vote(self, comment_id: str, vote_type: Any) -> Dict[str, Any]:
        """
        Count a helpful / not helpful vote on a comment.

        Raises:
            InvalidInputError: If vote_type is not "helpful" or "not_helpful"
            NotFoundError: If the comment doesn't exist
        """
        counter = VOTE_COUNTERS.get(vote_type) if isinstance(vote_type, str) else None
        if counter is None:
            raise InvalidInputError('Invalid vote type. Must be "helpful" or "not_helpful"')

        doc = await self._collection.find_one_and_update(
            {"_id": ObjectId(comment_id)},
            {"$inc": {counter: 1}},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            logger.warning(f"Comment not found for vote: {comment_id}")
            raise NotFoundError(self.not_found_message)
        return doc

    async def _present(self, docs: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return await self._populate(docs, MOVIE_SUMMARY_FIELDS)

    async def _populate(self, docs: List[Dict[str, Any]], fields: Mapping[str, int]) -> List[Dict[str, Any]]:
        movie_ids = {doc["movie_id"] for doc in docs if isinstance(doc.get("movie_id"), ObjectId)}
        if not movie_ids:
            return docs

        movies = await self._movies.find(
            {"_id": {"$in": list(movie_ids)}}, dict(fields)
        ).to_list(length=None)
        by_id = {movie["_id"]: movie for movie in movies}

        # A dangling reference is returned as null
        return [
            {**doc, "movie_id": by_id.get(doc["movie_id"])} if isinstance(doc.get("movie_id"), ObjectId) else doc
            for doc in docs
        ]
