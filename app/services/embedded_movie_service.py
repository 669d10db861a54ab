"""
Embedded movie service: movies that carry a plot embedding, searchable by
title/genre/year and by semantic similarity through Atlas Vector Search.
"""
from typing import Any, Dict, List, Optional

from app.config.settings import Settings
from app.models.embedded_movie_models import EmbeddedMovieCreate, EmbeddedMovieUpdate
from app.services.base import InvalidInputError, parse_leading_int
from app.services.embedding_service import EmbeddingResult, EmbeddingService
from app.services.movie_service import build_title_genre_year_filter, parse_year
from app.services.resource_service import ResourceService
from app.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_SEARCH_LIMIT = 10
# Candidates scanned per requested result by the ANN search
CANDIDATES_PER_RESULT = 10
# Plot vectors shipped with the dataset; kept out of search results
STOCK_EMBEDDING_FIELDS = ("plot_embedding", "plot_embedding_voyage_3_large")


class EmbeddedMovieService(ResourceService):
    """Service for the embedded movies collection and its vector index."""

    def __init__(self, *, collection, settings: Settings, embedding_service: Optional[EmbeddingService] = None):
        super().__init__(
            collection=collection,
            resource_name="Embedded movie",
            create_model=EmbeddedMovieCreate,
            update_model=EmbeddedMovieUpdate,
        )
        self._settings = settings
        self._embedding_service = embedding_service

    async def search(
        self, *, title: Optional[str] = None, genre: Optional[str] = None, year: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        query = build_title_genre_year_filter(title=title, genre=genre, year=year)
        return await self._collection.find(query).to_list(length=None)

    async def vector_search(self, *, query: Optional[str], limit: Optional[str] = None) -> Dict[str, Any]:
        """
        Rank movies by plot similarity to a free-text query.

        Raises:
            InvalidInputError: If the query is missing or the limit is not positive
            EmbeddingServiceError: If the query cannot be embedded
        """
        if not query:
            raise InvalidInputError("Query parameter is required")
        result_limit = self._resolve_limit(limit)

        embedding = await self._embed(query)
        pipeline = [self._vector_stage(embedding, limit=result_limit), *self._result_stages()]
        results = await self._collection.aggregate(pipeline).to_list(length=None)

        logger.info(f"Vector search for {query!r} returned {len(results)} movies")
        return {
            "query": query,
            "model": self._embedding_service.model,
            "results": results,
            "count": len(results),
        }

    async def hybrid_search(
        self,
        *,
        query: Optional[str],
        limit: Optional[str] = None,
        title: Optional[str] = None,
        genre: Optional[str] = None,
        year: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Vector search restricted by exact title, genre and year filters.

        The filters are applied inside ``$vectorSearch`` (they must be declared
        as filter fields on the index) and again with ``$match``.
        """
        if not query:
            raise InvalidInputError("Query parameter is required")
        result_limit = self._resolve_limit(limit)

        filters: Dict[str, Any] = {}
        if title:
            filters["title"] = title
        if genre:
            filters["genres"] = genre
        if year:
            filters["year"] = parse_year(year)

        embedding = await self._embed(query)
        pipeline: List[Dict[str, Any]] = [
            self._vector_stage(embedding, limit=result_limit * 2, filters=filters),
        ]
        if filters:
            pipeline.append({"$match": filters})
        pipeline.append({"$limit": result_limit})
        pipeline.extend(self._result_stages())

        results = await self._collection.aggregate(pipeline).to_list(length=None)
        logger.info(f"Hybrid search for {query!r} with {filters} returned {len(results)} movies")
        return {
            "query": query,
            "filters": filters,
            "results": results,
            "count": len(results),
        }

    async def list_missing_embeddings(self, *, limit: int = 100) -> List[Dict[str, Any]]:
        path = self._settings.PLOT_EMBEDDING_PATH
        query = {"$or": [{path: {"$exists": False}}, {path: None}]}
        cursor = self._collection.find(query, {path: 0}).limit(limit)
        movies = await cursor.to_list(length=limit)
        logger.info(f"Found {len(movies)} movies without plot embeddings (limit: {limit})")
        return movies

    async def store_embedding(self, movie: Dict[str, Any]) -> EmbeddingResult:
        """Embed one movie's plot and persist the vector on its document."""
        if self._embedding_service is None:
            raise RuntimeError("Embedding service not configured for EmbeddedMovieService.")
        result = await self._embedding_service.generate_plot_embedding(movie)
        await self._collection.update_one(
            {"_id": movie["_id"]},
            {"$set": {self._settings.PLOT_EMBEDDING_PATH: result.vector}},
        )
        logger.debug(f"Persisted plot embedding for movie {movie['_id']}")
        return result

    async def _embed(self, query: str) -> List[float]:
        if self._embedding_service is None:
            raise RuntimeError("Embedding service not configured for EmbeddedMovieService.")
        return await self._embedding_service.embed_query(query)

    def _vector_stage(
        self, embedding: List[float], *, limit: int, filters: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        stage: Dict[str, Any] = {
            "index": self._settings.PLOT_VECTOR_INDEX,
            "path": self._settings.PLOT_EMBEDDING_PATH,
            "queryVector": embedding,
            "numCandidates": limit * CANDIDATES_PER_RESULT,
            "limit": limit,
        }
        if filters:
            stage["filter"] = filters
        return {"$vectorSearch": stage}

    def _result_stages(self) -> List[Dict[str, Any]]:
        # Vectors are large; results carry the similarity score instead
        excluded = dict.fromkeys((*STOCK_EMBEDDING_FIELDS, self._settings.PLOT_EMBEDDING_PATH), 0)
        return [
            {"$set": {"score": {"$meta": "vectorSearchScore"}}},
            {"$project": excluded},
        ]

    @staticmethod
    def _resolve_limit(raw_limit: Optional[str]) -> int:
        if raw_limit is None or raw_limit == "":
            return DEFAULT_SEARCH_LIMIT
        limit = parse_leading_int(raw_limit)
        if limit is None or limit <= 0:
            raise InvalidInputError("limit must be a positive integer")
        return limit
