from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from app.services.embedding_service import EmbeddingService, EmbeddingServiceError


def _response(vector):
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


@pytest.fixture
def azure_client():
    return MagicMock()


@pytest.fixture
def service(settings, azure_client):
    return EmbeddingService(settings, client=azure_client, max_retries=2, retry_delay_seconds=0)


async def test_embed_query(service, azure_client, settings):
    azure_client.embeddings.create.return_value = _response([0.5, 0.1, 0.2, 0.3])

    vector = await service.embed_query("a heist in Los Angeles")

    assert vector == [0.5, 0.1, 0.2, 0.3]
    kwargs = azure_client.embeddings.create.call_args.kwargs
    assert kwargs["input"] == "a heist in Los Angeles"
    assert kwargs["dimensions"] == settings.EMBEDDING_VECTOR_SIZE


async def test_embed_query_rejects_empty_text(service, azure_client):
    with pytest.raises(EmbeddingServiceError):
        await service.embed_query("")
    azure_client.embeddings.create.assert_not_called()


async def test_wrong_vector_length(service, azure_client):
    azure_client.embeddings.create.return_value = _response([0.1, 0.2])

    with pytest.raises(EmbeddingServiceError, match="Expected embedding length 4, got 2"):
        await service.embed_query("heist")


async def test_retries_then_gives_up(service, azure_client):
    azure_client.embeddings.create.side_effect = OpenAIError("rate limited")

    with pytest.raises(EmbeddingServiceError, match="Failed to generate embedding: rate limited"):
        await service.embed_query("heist")
    assert azure_client.embeddings.create.call_count == 2


async def test_recovers_after_transient_error(service, azure_client):
    azure_client.embeddings.create.side_effect = [OpenAIError("blip"), _response([1.0, 0.0, 0.0, 0.0])]

    assert await service.embed_query("heist") == [1.0, 0.0, 0.0, 0.0]


async def test_missing_azure_settings(monkeypatch, settings):
    monkeypatch.setattr(settings, "AZURE_OPENAI_API_KEY", "")
    service = EmbeddingService(settings)

    with pytest.raises(EmbeddingServiceError, match="AZURE_OPENAI_API_KEY"):
        await service.embed_query("heist")


async def test_generate_plot_embedding(service, azure_client):
    azure_client.embeddings.create.return_value = _response([0.1, 0.2, 0.3, 0.4])

    result = await service.generate_plot_embedding({"title": "Heat", "year": 1995, "plot": "Cops and robbers."})

    assert result.vector == [0.1, 0.2, 0.3, 0.4]
    assert azure_client.embeddings.create.call_args.kwargs["input"] == (
        "Heat (1995) | Genres: Genres n/a | Plot: Cops and robbers."
    )


def test_build_plot_text_prefers_full_plot():
    text = EmbeddingService.build_plot_text(
        {"title": "Alien", "genres": ["Horror", "Sci-Fi"], "plot": "short", "fullplot": "long version"}
    )

    assert text == "Alien | Genres: Horror, Sci-Fi | Plot: long version"
