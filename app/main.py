# Create the FastAPI app
# Load settings, connect to MongoDB on startup and close the client on shutdown
# Mount the five resource routers plus health

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config.settings import Settings
from app.db.client import close_mongo_connection, connect_to_mongo, ensure_indexes
from app.middleware import RequestLoggingMiddleware
from app.routes import comments, embedded_movies, health, movies, theaters, users
from app.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)

API_TITLE = "MFlix API"
API_VERSION = "1.0.0"

RESOURCE_ROUTERS = (users.router, movies.router, theaters.router, comments.router, embedded_movies.router)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    configure_logging(settings.log_level_value)

    # The app must not serve requests without a reachable database
    client = await connect_to_mongo(settings)
    await ensure_indexes(client[settings.DATABASE_NAME], settings)
    app.state.mongo_client = client
    logger.info(f"{API_TITLE} started")

    yield

    close_mongo_connection(client)
    app.state.mongo_client = None
    logger.info(f"{API_TITLE} stopped")


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"message": "Route not found"})
        return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()
    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.mongo_client = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    register_exception_handlers(app)

    @app.get("/", tags=["meta"], summary="API information")
    async def api_info() -> dict:
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "endpoints": {
                "movies": movies.router.prefix,
                "comments": comments.router.prefix,
                "users": users.router.prefix,
                "theaters": theaters.router.prefix,
                "embeddedMovies": embedded_movies.router.prefix,
            },
        }

    for router in RESOURCE_ROUTERS:
        app.include_router(router)
    app.include_router(health.router)

    return app


if __name__ == "__main__":
    uvicorn.run("app.main:create_app", factory=True, host="0.0.0.0", port=8000)
