"""
Movie catalogue service: CRUD plus search and rating/engagement analytics.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId

from app.models.movie_models import MovieCreate, MovieUpdate
from app.services.base import NotFoundError, PageRequest, parse_leading_int
from app.services.resource_service import ResourceService
from app.utils.logger import get_logger

logger = get_logger(__name__)

RATED = {"imdb.rating": {"$exists": True, "$ne": None}}


def parse_year(raw: str) -> int:
    """
    Leading integer of a year query value.

    Raises:
        ValueError: If there is none; reported like any other failed read
    """
    year = parse_leading_int(raw)
    if year is None:
        raise ValueError(f"Cast to number failed for value {raw!r} at path \"year\"")
    return year


def build_title_genre_year_filter(
    *, title: Optional[str], genre: Optional[str], year: Optional[str]
) -> Dict[str, Any]:
    """
    Filter used by the movie and embedded movie search endpoints.

    ``title`` is a case-insensitive regular expression, matched as given.
    """
    query: Dict[str, Any] = {}
    if title:
        query["title"] = {"$regex": title, "$options": "i"}
    if genre:
        query["genres"] = {"$in": [genre]}
    if year:
        query["year"] = parse_year(year)
    return query


class MovieService(ResourceService):
    """Service for the movies collection."""

    def __init__(self, *, collection, comments_collection=None):
        super().__init__(
            collection=collection,
            resource_name="Movie",
            create_model=MovieCreate,
            update_model=MovieUpdate,
        )
        self._comments = comments_collection

    async def search(
        self, *, title: Optional[str] = None, genre: Optional[str] = None, year: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = build_title_genre_year_filter(title=title, genre=genre, year=year)
        docs = await self._collection.find(query).to_list(length=None)
        logger.info(f"Movie search {query} matched {len(docs)} documents")
        return docs

    async def top_rated(self, page_request: PageRequest, *, min_votes: int = 0) -> Tuple[List[Dict[str, Any]], int]:
        match = {**RATED, "imdb.votes": {"$gte": min_votes}}
        pipeline = [
            {"$match": match},
            {"$sort": {"imdb.rating": -1}},
            {"$skip": page_request.skip},
            {"$limit": page_request.limit},
            {"$project": {"_id": 1, "title": 1, "year": 1, "genres": 1, "imdb.rating": 1, "imdb.votes": 1}},
        ]
        docs = await self._collection.aggregate(pipeline).to_list(length=None)
        total = await self._collection.count_documents(match)
        return docs, total

    async def stats_by_genre(self, *, genre: Optional[str] = None, sort_by: str = "count") -> List[Dict[str, Any]]:
        """Count and average IMDb rating per genre."""
        pipeline: List[Dict[str, Any]] = [
            {"$match": {"genres": {"$exists": True, "$ne": None}, **RATED}},
            {"$unwind": "$genres"},
        ]
        if genre:
            pipeline.append({"$match": {"genres": genre}})
        pipeline.extend([
            {"$group": {"_id": "$genres", "count": {"$sum": 1}, "averageRating": {"$avg": "$imdb.rating"}}},
            {"$project": {"genre": "$_id", "_id": 0, "count": 1, "averageRating": {"$round": ["$averageRating", 2]}}},
            {"$sort": {"averageRating": -1} if sort_by == "rating" else {"count": -1}},
        ])
        return await self._collection.aggregate(pipeline).to_list(length=None)

    async def stats_by_year(
        self, *, start_year: Optional[int] = None, end_year: Optional[int] = None, sort_by: str = "year"
    ) -> List[Dict[str, Any]]:
        """Count and average IMDb rating per release year."""
        year_filter: Dict[str, Any] = {"$exists": True, "$ne": None}
        if start_year:
            year_filter["$gte"] = start_year
        if end_year:
            year_filter["$lte"] = end_year

        if sort_by == "count":
            sort = {"count": -1}
        elif sort_by == "rating":
            sort = {"averageRating": -1}
        else:
            sort = {"year": 1}

        pipeline = [
            {"$match": {"year": year_filter, **RATED}},
            {"$group": {"_id": "$year", "count": {"$sum": 1}, "averageRating": {"$avg": "$imdb.rating"}}},
            {"$project": {"year": "$_id", "_id": 0, "count": 1, "averageRating": {"$round": ["$averageRating", 2]}}},
            {"$sort": sort},
        ]
        return await self._collection.aggregate(pipeline).to_list(length=None)

    async def trending(self, *, days: int, limit: int) -> List[Dict[str, Any]]:
        """Movies with the most comments posted in the last ``days`` days."""
        since = datetime.now(timezone.utc) - timedelta(days=days)
        pipeline = [
            {
                "$lookup": {
                    "from": self._comments.name,
                    "localField": "_id",
                    "foreignField": "movie_id",
                    "as": "comments",
                }
            },
            {"$unwind": "$comments"},
            {"$match": {"comments.date": {"$gte": since}}},
            {
                "$group": {
                    "_id": "$_id",
                    "title": {"$first": "$title"},
                    "year": {"$first": "$year"},
                    "genres": {"$first": "$genres"},
                    "commentCount": {"$sum": 1},
                }
            },
            {"$sort": {"commentCount": -1}},
            {"$limit": limit},
            {"$project": {"_id": 1, "title": 1, "year": 1, "genres": 1, "commentCount": 1}},
        ]
        movies = await self._collection.aggregate(pipeline).to_list(length=None)
        logger.info(f"Trending over {days} days: {len(movies)} movies")
        return movies

    async def engagement(self, movie_id: str) -> Dict[str, Any]:
        """
        Comment count and engagement score for one movie.

        The score is the number of comments plus ten times the IMDb rating.

        Raises:
            NotFoundError: If the movie doesn't exist
        """
        if self._comments is None:
            raise RuntimeError("Comments collection not configured for MovieService.")

        object_id = ObjectId(movie_id)
        movie = await self._collection.find_one({"_id": object_id})
        if not movie:
            logger.warning(f"Movie not found for engagement stats: {movie_id}")
            raise NotFoundError(self.not_found_message)

        comment_count = await self._comments.count_documents({"movie_id": object_id})
        rating = (movie.get("imdb") or {}).get("rating")
        score = comment_count + (rating * 10 if rating else 0)

        return {
            "movie": movie,
            "engagementStats": {
                "totalComments": comment_count,
                "engagementScore": score,
            },
        }
