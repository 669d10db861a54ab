"""CRUD endpoints shared by every resource, built once per resource."""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query, Request

from app.config.settings import Settings
from app.db.client import get_settings
from app.routes.outcomes import OperationSite, failure_response, message_response, success_response
from app.services.base import paginate_results, resolve_page_request
from app.services.resource_service import ResourceService


@dataclass(frozen=True)
class ResourceDefinition:
    """Names a resource's collection keys in list responses."""

    items_key: str
    total_key: str


def add_crud_routes(
    router: APIRouter,
    definition: ResourceDefinition,
    get_service: Callable[..., ResourceService],
) -> APIRouter:
    """
    Register list/get/create/update/delete on ``router``.

    Call this after any fixed-path routes of the resource (``/search`` ...) so
    they are matched before ``/{record_id}``.
    """

    @router.get("", summary="List records page by page")
    async def list_records(
        page: Optional[str] = Query(None, description="Page number (1-indexed)"),
        limit: Optional[str] = Query(None, description="Results per page"),
        service: ResourceService = Depends(get_service),
        settings: Settings = Depends(get_settings),
    ):
        page_request = resolve_page_request(page, limit, default_limit=settings.DEFAULT_PAGE_SIZE)
        try:
            docs, total = await service.list_page(page_request)
        except Exception as exc:
            return failure_response(exc, OperationSite.READ)
        return success_response(
            paginate_results(
                docs,
                page_request=page_request,
                total=total,
                items_key=definition.items_key,
                total_key=definition.total_key,
            )
        )

    @router.get("/{record_id}", summary="Get one record")
    async def get_record(record_id: str, service: ResourceService = Depends(get_service)):
        try:
            doc = await service.get(record_id)
        except Exception as exc:
            return failure_response(exc, OperationSite.READ)
        return success_response(doc)

    @router.post("", status_code=201, summary="Create a record")
    async def create_record(request: Request, service: ResourceService = Depends(get_service)):
        try:
            payload = await request.json()
            doc = await service.create(payload)
        except Exception as exc:
            return failure_response(exc, OperationSite.CREATE)
        return success_response(doc, status_code=201)

    @router.put("/{record_id}", summary="Update a record")
    async def update_record(record_id: str, request: Request, service: ResourceService = Depends(get_service)):
        try:
            payload = await request.json()
            doc = await service.update(record_id, payload)
        except Exception as exc:
            return failure_response(exc, OperationSite.UPDATE)
        return success_response(doc)

    @router.delete("/{record_id}", summary="Delete a record")
    async def delete_record(record_id: str, service: ResourceService = Depends(get_service)):
        try:
            await service.delete(record_id)
        except Exception as exc:
            return failure_response(exc, OperationSite.DELETE)
        return message_response(200, f"{service.resource_name} deleted successfully")

    return router
