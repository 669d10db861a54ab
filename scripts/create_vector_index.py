"""
Create (or inspect) the Atlas Vector Search index over the embedded movies'
plot embeddings. Title, genres and year are declared as filter fields so the
hybrid search can pre-filter inside $vectorSearch.
"""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import OperationFailure

from app.config.settings import Settings
from app.utils.logger import setup_logger

logger = setup_logger(__name__, level="INFO")

FILTER_FIELDS = ("title", "genres", "year")


def build_index_definition(settings: Settings) -> Dict[str, Any]:
    fields = [
        {
            "type": "vector",
            "path": settings.PLOT_EMBEDDING_PATH,
            "numDimensions": settings.EMBEDDING_VECTOR_SIZE,
            "similarity": "cosine",
        }
    ]
    fields.extend({"type": "filter", "path": path} for path in FILTER_FIELDS)
    return {
        "name": settings.PLOT_VECTOR_INDEX,
        "type": "vectorSearch",
        "definition": {"fields": fields},
    }


async def find_index(collection: AsyncIOMotorCollection, name: str) -> Optional[Dict[str, Any]]:
    indexes = await collection.list_search_indexes().to_list(length=None)
    for index in indexes:
        if index.get("name") == name:
            return index
    return None


async def check_index_status(settings: Settings) -> None:
    client = AsyncIOMotorClient(settings.MONGO_URI)
    collection = client[settings.DATABASE_NAME][settings.EMBEDDED_MOVIES_COLLECTION]
    try:
        index = await find_index(collection, settings.PLOT_VECTOR_INDEX)
        if index is None:
            logger.info(f"Index '{settings.PLOT_VECTOR_INDEX}' not found. Run without --check-only to create it.")
            return
        status = index.get("status", "unknown")
        logger.info(f"Index '{settings.PLOT_VECTOR_INDEX}' status: {status}")
        if status != "READY":
            logger.info("The index is still building; vector searches will fail until it is READY.")
    finally:
        client.close()


async def create_vector_search_index(settings: Settings) -> None:
    client = AsyncIOMotorClient(settings.MONGO_URI)
    db = client[settings.DATABASE_NAME]
    collection_name = settings.EMBEDDED_MOVIES_COLLECTION
    index_name = settings.PLOT_VECTOR_INDEX

    try:
        existing = await find_index(db[collection_name], index_name)
        if existing is not None:
            logger.info(f"Index '{index_name}' already exists (status: {existing.get('status', 'unknown')})")
            return

        definition = build_index_definition(settings)
        logger.info(
            f"Creating index '{index_name}' on {collection_name}.{settings.PLOT_EMBEDDING_PATH} "
            f"({settings.EMBEDDING_VECTOR_SIZE} dimensions, filters: {', '.join(FILTER_FIELDS)})"
        )
        try:
            await db.command({"createSearchIndexes": collection_name, "indexes": [definition]})
        except OperationFailure as exc:
            if "already exists" not in str(exc).lower():
                logger.error(f"Failed to create vector search index: {exc}")
                logger.error("Atlas Search requires an Atlas cluster and a user allowed to create search indexes.")
                raise
            logger.info(f"Index '{index_name}' already exists")
            return
        logger.info("Index creation started. Building usually takes a few minutes.")
    finally:
        client.close()


def main():
    parser = argparse.ArgumentParser(description="Create or check the plot embedding vector search index")
    parser.add_argument("--check-only", action="store_true", help="Only report the index status")
    args = parser.parse_args()

    settings = Settings()
    if args.check_only:
        asyncio.run(check_index_status(settings))
    else:
        asyncio.run(create_vector_search_index(settings))


if __name__ == "__main__":
    main()
