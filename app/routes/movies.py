"""Movie endpoints: CRUD, search and analytics."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.config.settings import Settings
from app.db.client import get_database, get_settings
from app.routes.outcomes import OperationSite, failure_response, success_response
from app.routes.resource_router import ResourceDefinition, add_crud_routes
from app.services.base import paginate_results, parse_leading_int, resolve_page_request
from app.services.movie_service import MovieService

router = APIRouter(prefix="/api/movies", tags=["movies"])

MOVIES = ResourceDefinition(items_key="movies", total_key="totalMovies")


async def get_movie_service(
    db=Depends(get_database), settings: Settings = Depends(get_settings)
) -> MovieService:
    return MovieService(
        collection=db[settings.MOVIES_COLLECTION],
        comments_collection=db[settings.COMMENTS_COLLECTION],
    )


@router.get("/search", summary="Search movies by title, genre or year")
async def search_movies(
    title: Optional[str] = Query(None, description="Case-insensitive title fragment"),
    genre: Optional[str] = Query(None),
    year: Optional[str] = Query(None),
    service: MovieService = Depends(get_movie_service),
):
    try:
        movies = await service.search(title=title, genre=genre, year=year)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(movies)


@router.get("/analytics/top-rated", summary="Movies ordered by IMDb rating")
async def top_rated_movies(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    min_votes: Optional[str] = Query(None, alias="minVotes"),
    service: MovieService = Depends(get_movie_service),
    settings: Settings = Depends(get_settings),
):
    page_request = resolve_page_request(page, limit, default_limit=settings.DEFAULT_PAGE_SIZE)
    try:
        movies, total = await service.top_rated(page_request, min_votes=parse_leading_int(min_votes) or 0)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(
        paginate_results(
            movies,
            page_request=page_request,
            total=total,
            items_key=MOVIES.items_key,
            total_key=MOVIES.total_key,
        )
    )


@router.get("/analytics/genres", summary="Movie count and average rating per genre")
async def movies_by_genre(
    genre: Optional[str] = Query(None),
    sort_by: str = Query("count", alias="sortBy", description="'count' or 'rating'"),
    service: MovieService = Depends(get_movie_service),
):
    try:
        stats = await service.stats_by_genre(genre=genre, sort_by=sort_by)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(stats)


@router.get("/analytics/years", summary="Movie count and average rating per year")
async def movies_by_year(
    start_year: Optional[str] = Query(None, alias="startYear"),
    end_year: Optional[str] = Query(None, alias="endYear"),
    sort_by: str = Query("year", alias="sortBy", description="'year', 'count' or 'rating'"),
    service: MovieService = Depends(get_movie_service),
):
    try:
        stats = await service.stats_by_year(
            start_year=parse_leading_int(start_year),
            end_year=parse_leading_int(end_year),
            sort_by=sort_by,
        )
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(stats)


@router.get("/analytics/trending", summary="Most commented movies over recent days")
async def trending_movies(
    days: Optional[str] = Query(None, description="Look-back window in days (default 30)"),
    limit: Optional[str] = Query(None),
    service: MovieService = Depends(get_movie_service),
    settings: Settings = Depends(get_settings),
):
    try:
        movies = await service.trending(
            days=parse_leading_int(days) or 30,
            limit=parse_leading_int(limit) or settings.DEFAULT_PAGE_SIZE,
        )
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(movies)


@router.get("/analytics/engagement/{movie_id}", summary="Comment engagement for one movie")
async def movie_engagement(movie_id: str, service: MovieService = Depends(get_movie_service)):
    try:
        stats = await service.engagement(movie_id)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(stats)


add_crud_routes(router, MOVIES, get_movie_service)
