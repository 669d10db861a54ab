"""User endpoints."""

from fastapi import APIRouter, Depends

from app.config.settings import Settings
from app.db.client import get_database, get_settings
from app.models.user_models import UserCreate, UserUpdate
from app.routes.resource_router import ResourceDefinition, add_crud_routes
from app.services.resource_service import ResourceService

router = APIRouter(prefix="/api/users", tags=["users"])


async def get_user_service(
    db=Depends(get_database), settings: Settings = Depends(get_settings)
) -> ResourceService:
    return ResourceService(
        collection=db[settings.USERS_COLLECTION],
        resource_name="User",
        create_model=UserCreate,
        update_model=UserUpdate,
    )


add_crud_routes(router, ResourceDefinition(items_key="users", total_key="totalUsers"), get_user_service)
