"""
Plot embeddings through an Azure OpenAI embedding deployment.

The OpenAI SDK client is synchronous; requests run in a worker thread so the
event loop keeps serving while the provider answers.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from openai import AzureOpenAI, OpenAIError

from app.config.settings import Settings
from app.utils.logger import get_logger

logger = get_logger(__name__)


class EmbeddingServiceError(RuntimeError):
    """Raised when the embedding provider fails or returns an unusable vector."""


@dataclass(frozen=True)
class EmbeddingResult:
    vector: List[float]
    model: str
    generated_at: datetime


class EmbeddingService:
    def __init__(
        self,
        settings: Settings,
        *,
        client: Optional[AzureOpenAI] = None,
        max_retries: int = 3,
        retry_delay_seconds: float = 2.0,
    ) -> None:
        self.settings = settings
        self._client = client
        self._max_retries = max_retries
        self._retry_delay_seconds = retry_delay_seconds

    @property
    def model(self) -> str:
        return self.settings.AZURE_OPENAI_EMBEDDING_DEPLOYMENT

    async def embed_query(self, text: str) -> List[float]:
        """Embed free text typed by a user, e.g. a vector search query."""
        if not text or not isinstance(text, str):
            raise EmbeddingServiceError("Text must be a non-empty string")
        return await self._embed(text)

    async def generate_plot_embedding(self, movie_doc: Dict[str, Any]) -> EmbeddingResult:
        vector = await self._embed(self.build_plot_text(movie_doc))
        return EmbeddingResult(vector=vector, model=self.model, generated_at=datetime.now(timezone.utc))

    async def _embed(self, text: str) -> List[float]:
        vector = await asyncio.to_thread(self._request_embedding, text)
        self._check_dimensions(vector)
        return vector

    def _request_embedding(self, text: str) -> List[float]:
        client = self._get_client()
        for attempt in range(1, self._max_retries + 1):
            try:
                response = client.embeddings.create(
                    model=self.model,
                    input=text,
                    dimensions=self.settings.EMBEDDING_VECTOR_SIZE,
                )
            except OpenAIError as exc:
                if attempt == self._max_retries:
                    raise EmbeddingServiceError(f"Failed to generate embedding: {exc}") from exc
                logger.warning(f"Embedding request failed (attempt {attempt}/{self._max_retries}): {exc}")
                time.sleep(self._retry_delay_seconds * attempt)
                continue

            vector = response.data[0].embedding
            if not isinstance(vector, list):
                raise EmbeddingServiceError("Embedding vector missing or invalid.")
            return vector
        raise EmbeddingServiceError("Failed to generate embedding: no attempts made")

    def _check_dimensions(self, vector: Sequence[float]) -> None:
        expected = self.settings.EMBEDDING_VECTOR_SIZE
        if len(vector) != expected:
            raise EmbeddingServiceError(f"Expected embedding length {expected}, got {len(vector)}.")

    def _get_client(self) -> AzureOpenAI:
        # Azure settings are only required once a vector is requested
        if self._client is None:
            try:
                self.settings.require_embedding_settings()
            except ValueError as exc:
                raise EmbeddingServiceError(str(exc)) from exc
            self._client = AzureOpenAI(
                azure_endpoint=self.settings.AZURE_OPENAI_ENDPOINT,
                api_key=self.settings.AZURE_OPENAI_API_KEY,
                api_version=self.settings.AZURE_OPENAI_API_VERSION,
            )
        return self._client

    @staticmethod
    def build_plot_text(doc: Dict[str, Any]) -> str:
        """Title (year) | Genres: ... | Plot: ... with the full plot preferred."""
        title = doc.get("title") or "Untitled movie"
        year = doc.get("year")
        heading = f"{title} ({year})" if year else title

        genres = doc.get("genres") or []
        genres_str = ", ".join(genres) if genres else "Genres n/a"
        plot = doc.get("fullplot") or doc.get("plot") or "Plot not provided"

        return " | ".join(part.strip() for part in [heading, f"Genres: {genres_str}", f"Plot: {plot}"])
