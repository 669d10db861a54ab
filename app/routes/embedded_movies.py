"""Embedded movie endpoints: CRUD, attribute search and vector search."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.config.settings import Settings
from app.db.client import get_database, get_settings
from app.routes.outcomes import OperationSite, failure_response, success_response
from app.routes.resource_router import ResourceDefinition, add_crud_routes
from app.services.embedded_movie_service import EmbeddedMovieService
from app.services.embedding_service import EmbeddingService

router = APIRouter(prefix="/api/embedded-movies", tags=["embedded-movies"])


def get_embedding_service(settings: Settings = Depends(get_settings)) -> EmbeddingService:
    return EmbeddingService(settings=settings)


async def get_embedded_movie_service(
    db=Depends(get_database),
    settings: Settings = Depends(get_settings),
    embedding_service: EmbeddingService = Depends(get_embedding_service),
) -> EmbeddedMovieService:
    return EmbeddedMovieService(
        collection=db[settings.EMBEDDED_MOVIES_COLLECTION],
        settings=settings,
        embedding_service=embedding_service,
    )


@router.get("/search", summary="Search embedded movies by title, genre or year")
async def search_embedded_movies(
    title: Optional[str] = Query(None),
    genre: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    service: EmbeddedMovieService = Depends(get_embedded_movie_service),
):
    try:
        movies = await service.search(title=title, genre=genre, year=year)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(movies)


@router.get("/vector-search", summary="Semantic search over plot embeddings")
async def vector_search(
    query: Optional[str] = Query(None, description="Free-text description of the plot"),
    limit: Optional[str] = Query(None),
    service: EmbeddedMovieService = Depends(get_embedded_movie_service),
):
    try:
        result = await service.vector_search(query=query, limit=limit)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(result)


@router.get("/hybrid-search", summary="Semantic search restricted by title, genre or year")
async def hybrid_search(
    query: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    title: Optional[str] = Query(None),
    genre: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    service: EmbeddedMovieService = Depends(get_embedded_movie_service),
):
    try:
        result = await service.hybrid_search(query=query, limit=limit, title=title, genre=genre, year=year)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(result)


add_crud_routes(
    router,
    ResourceDefinition(items_key="embeddedMovies", total_key="totalEmbeddedMovies"),
    get_embedded_movie_service,
)
