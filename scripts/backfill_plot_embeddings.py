"""
Backfill plot embeddings for embedded movies that do not have one yet.
"""
import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient

from app.config.settings import Settings
from app.services.embedded_movie_service import EmbeddedMovieService
from app.services.embedding_service import EmbeddingService
from app.utils.logger import setup_logger

logger = setup_logger(__name__, level="INFO")


async def backfill_plot_embeddings(*, limit: int = 100, batch_size: int = 10, dry_run: bool = False):
    """
    Embed up to ``limit`` movies, ``batch_size`` at a time.

    A failure on one movie is logged and counted; the run moves on to the next.
    """
    settings = Settings()
    client = AsyncIOMotorClient(settings.MONGO_URI)
    service = EmbeddedMovieService(
        collection=client[settings.DATABASE_NAME][settings.EMBEDDED_MOVIES_COLLECTION],
        settings=settings,
        embedding_service=EmbeddingService(settings=settings),
    )

    try:
        movies = await service.list_missing_embeddings(limit=limit)
        if not movies:
            logger.info("No movies need plot embeddings.")
            return

        if dry_run:
            for i, movie in enumerate(movies, 1):
                logger.info(f"{i}. {movie['_id']}: {movie.get('title', 'N/A')} ({movie.get('year', '?')})")
            logger.info(f"Dry run: {len(movies)} movies would be embedded")
            return

        succeeded = failed = 0
        for start in range(0, len(movies), batch_size):
            batch = movies[start:start + batch_size]
            for movie in batch:
                try:
                    result = await service.store_embedding(movie)
                except Exception as exc:
                    failed += 1
                    logger.error(f"Failed to embed movie {movie['_id']}: {exc}")
                    continue
                succeeded += 1
                logger.debug(f"Embedded movie {movie['_id']} with {result.model}")
            logger.info(f"Batch {start // batch_size + 1} done: {start + len(batch)}/{len(movies)}")

        logger.info(f"Backfill complete. Embedded: {succeeded}, failed: {failed}")
    finally:
        client.close()


def main():
    parser = argparse.ArgumentParser(description="Backfill plot embeddings for embedded movies")
    parser.add_argument("--limit", type=int, default=100, help="Maximum number of movies to process (default: 100)")
    parser.add_argument("--batch-size", type=int, default=10, help="Movies per batch (default: 10)")
    parser.add_argument("--dry-run", action="store_true", help="List the movies without embedding them")
    args = parser.parse_args()

    asyncio.run(backfill_plot_embeddings(limit=args.limit, batch_size=args.batch_size, dry_run=args.dry_run))


if __name__ == "__main__":
    main()
