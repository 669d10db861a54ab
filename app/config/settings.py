import logging
import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv


BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / ".env"

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _positive_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default).strip()
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}.") from exc
    if value <= 0:
        raise ValueError(f"{name} must be a positive integer.")
    return value


# If MongoDB is missing it shall not start the application
class Settings:
    # Read MONGO_URI, DATABASE_NAME and the collection names from environment.
    def __init__(self):
        # Load .env in __init__ to ensure it works in Uvicorn's child processes.
        # Values already exported in the environment win over the file.
        if ENV_PATH.exists():
            load_dotenv(dotenv_path=ENV_PATH, override=False)

        self.MONGO_URI = os.environ.get("MONGO_URI", "").strip()
        if not self.MONGO_URI:
            raise ValueError("MONGO_URI environment variable is not set.")

        self.DATABASE_NAME = os.environ.get("DATABASE_NAME", "sample_mflix").strip()
        if not self.DATABASE_NAME:
            raise ValueError("DATABASE_NAME environment variable is empty.")

        self.MONGO_SERVER_SELECTION_TIMEOUT_MS = _positive_int("MONGO_SERVER_SELECTION_TIMEOUT_MS", "5000")

        self.USERS_COLLECTION = os.environ.get("USERS_COLLECTION", "users").strip()
        self.MOVIES_COLLECTION = os.environ.get("MOVIES_COLLECTION", "movies").strip()
        self.THEATERS_COLLECTION = os.environ.get("THEATERS_COLLECTION", "theaters").strip()
        self.COMMENTS_COLLECTION = os.environ.get("COMMENTS_COLLECTION", "comments").strip()
        self.EMBEDDED_MOVIES_COLLECTION = os.environ.get("EMBEDDED_MOVIES_COLLECTION", "embedded_movies").strip()

        if not all([
            self.USERS_COLLECTION,
            self.MOVIES_COLLECTION,
            self.THEATERS_COLLECTION,
            self.COMMENTS_COLLECTION,
            self.EMBEDDED_MOVIES_COLLECTION,
        ]):
            raise ValueError("One or more collection names are empty in environment variables.")

        self.DEFAULT_PAGE_SIZE = _positive_int("DEFAULT_PAGE_SIZE", "10")

        self.LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
        if self.LOG_LEVEL not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL '{self.LOG_LEVEL}'. Must be one of: {sorted(VALID_LOG_LEVELS)}")

        self.CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*").strip()

        # Embedding settings are only needed by the vector search endpoints,
        # so they are checked lazily by require_embedding_settings().
        self.AZURE_OPENAI_API_KEY = os.environ.get("AZURE_OPENAI_API_KEY", "").strip()
        self.AZURE_OPENAI_ENDPOINT = os.environ.get("AZURE_OPENAI_ENDPOINT", "").strip()
        self.AZURE_OPENAI_API_VERSION = os.environ.get("AZURE_OPENAI_API_VERSION", "2024-02-15").strip()
        self.AZURE_OPENAI_EMBEDDING_DEPLOYMENT = os.environ.get("AZURE_OPENAI_EMBEDDING_DEPLOYMENT", "").strip()

        self.EMBEDDING_VECTOR_SIZE = _positive_int("EMBEDDING_DIMENSIONS", "2048")

        # Vector field written by the backfill script and its search index. The
        # dataset's stock plot vectors come from other models and are not queried.
        self.PLOT_VECTOR_INDEX = os.environ.get("PLOT_VECTOR_INDEX", "plot_embedding_openai_index").strip()
        self.PLOT_EMBEDDING_PATH = os.environ.get("PLOT_EMBEDDING_PATH", "plot_embedding_openai").strip()

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.LOG_LEVEL, logging.INFO)

    def require_embedding_settings(self) -> None:
        for attr, value in {
            "AZURE_OPENAI_API_KEY": self.AZURE_OPENAI_API_KEY,
            "AZURE_OPENAI_ENDPOINT": self.AZURE_OPENAI_ENDPOINT,
            "AZURE_OPENAI_API_VERSION": self.AZURE_OPENAI_API_VERSION,
            "AZURE_OPENAI_EMBEDDING_DEPLOYMENT": self.AZURE_OPENAI_EMBEDDING_DEPLOYMENT,
        }.items():
            if not value:
                raise ValueError(f"{attr} environment variable is not set.")
