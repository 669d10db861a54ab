"""Comment endpoints: CRUD, per-movie and per-user listings, reviewers and votes."""

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, Request

from app.config.settings import Settings
from app.db.client import get_database, get_settings
from app.routes.outcomes import OperationSite, failure_response, success_response
from app.routes.resource_router import ResourceDefinition, add_crud_routes
from app.services.base import InvalidInputError, paginate_results, parse_leading_int, resolve_page_request
from app.services.comment_service import CommentService, engagement_level

router = APIRouter(prefix="/api/comments", tags=["comments"])

COMMENTS = ResourceDefinition(items_key="comments", total_key="totalComments")


async def get_comment_service(
    db=Depends(get_database), settings: Settings = Depends(get_settings)
) -> CommentService:
    return CommentService(
        collection=db[settings.COMMENTS_COLLECTION],
        movies_collection=db[settings.MOVIES_COLLECTION],
    )


@router.get("/top-reviewers", summary="Emails with the most comments")
async def top_reviewers(
    limit: Optional[str] = Query(None),
    service: CommentService = Depends(get_comment_service),
    settings: Settings = Depends(get_settings),
):
    try:
        reviewers = await service.top_reviewers(limit=parse_leading_int(limit) or settings.DEFAULT_PAGE_SIZE)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(reviewers)


@router.get("/genre/{genre}", summary="Newest comments on movies of a genre")
async def comments_by_genre(
    genre: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    service: CommentService = Depends(get_comment_service),
    settings: Settings = Depends(get_settings),
):
    page_request = resolve_page_request(page, limit, default_limit=settings.DEFAULT_PAGE_SIZE)
    try:
        comments, total = await service.recent_by_genre(genre, page_request)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)

    body = paginate_results(
        comments,
        page_request=page_request,
        total=total,
        items_key=COMMENTS.items_key,
        total_key=COMMENTS.total_key,
    )
    body["genre"] = genre
    return success_response(body)


@router.get("/stats/movie/{movie_id}", summary="Comment statistics for one movie")
async def movie_comment_stats(
    movie_id: str,
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO-8601 lower bound"),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO-8601 upper bound"),
    service: CommentService = Depends(get_comment_service),
):
    try:
        stats = await service.stats_for_movie(movie_id, start_date=start_date, end_date=end_date)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(stats)


@router.get("/movie/{movie_id}", summary="All comments on a movie, newest first")
async def comments_by_movie(movie_id: str, service: CommentService = Depends(get_comment_service)):
    try:
        comments = await service.list_by_movie(movie_id)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(comments)


@router.get("/user/{email}", summary="A user's comment history")
async def user_comment_history(
    email: str,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    service: CommentService = Depends(get_comment_service),
    settings: Settings = Depends(get_settings),
):
    page_request = resolve_page_request(page, limit, default_limit=settings.DEFAULT_PAGE_SIZE)
    try:
        comments, total = await service.user_history(email, page_request)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)

    body = paginate_results(
        comments,
        page_request=page_request,
        total=total,
        items_key=COMMENTS.items_key,
        total_key=COMMENTS.total_key,
    )
    body["user"] = {"email": email}
    body["engagementLevel"] = engagement_level(total)
    return success_response(body)


async def read_vote_body(request: Request) -> Any:
    """JSON body of a vote request; an empty body reads as an empty object."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise InvalidInputError(f"Request body is not valid JSON: {exc}") from exc


@router.patch("/{comment_id}/vote", summary="Vote a comment helpful or not helpful")
async def vote_comment(comment_id: str, request: Request, service: CommentService = Depends(get_comment_service)):
    try:
        payload = await read_vote_body(request)
        vote_type = payload.get("voteType") if isinstance(payload, dict) else None
        comment = await service.vote(comment_id, vote_type)
    except Exception as exc:
        return failure_response(exc, OperationSite.READ)
    return success_response(comment)


add_crud_routes(router, COMMENTS, get_comment_service)
