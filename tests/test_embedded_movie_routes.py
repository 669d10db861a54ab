from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId

from app.routes.embedded_movies import get_embedding_service
from app.services.embedding_service import EmbeddingServiceError

QUERY_VECTOR = [0.1, 0.2, 0.3, 0.4]


@pytest.fixture
def embedding_service(app):
    service = MagicMock()
    service.model = "text-embedding-test"
    service.embed_query = AsyncMock(return_value=QUERY_VECTOR)
    app.dependency_overrides[get_embedding_service] = lambda: service
    return service


async def test_list_embedded_movies_keys(client, fake_db):
    fake_db["embedded_movies"].count_documents.return_value = 0

    response = await client.get("/api/embedded-movies")

    assert response.json() == {"embeddedMovies": [], "currentPage": 1, "totalPages": 0, "totalEmbeddedMovies": 0}


async def test_delete_message_names_resource(client, fake_db):
    fake_db["embedded_movies"].find_one_and_delete.return_value = {"_id": ObjectId()}

    response = await client.delete(f"/api/embedded-movies/{ObjectId()}")

    assert response.json() == {"message": "Embedded movie deleted successfully"}


async def test_vector_search_requires_query(client, embedding_service):
    response = await client.get("/api/embedded-movies/vector-search")

    assert response.status_code == 400
    assert response.json() == {"message": "Query parameter is required"}
    embedding_service.embed_query.assert_not_awaited()


async def test_vector_search_embeds_query(client, fake_db, embedding_service, settings):
    oid = ObjectId()
    fake_db["embedded_movies"].aggregate.return_value.to_list.return_value = [
        {"_id": oid, "title": "Blade Runner", "score": 0.91}
    ]

    response = await client.get(
        "/api/embedded-movies/vector-search", params={"query": "androids in the rain", "limit": "5"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["query"] == "androids in the rain"
    assert body["model"] == "text-embedding-test"
    assert body["count"] == 1
    assert body["results"][0]["_id"] == str(oid)
    embedding_service.embed_query.assert_awaited_once_with("androids in the rain")

    pipeline = fake_db["embedded_movies"].aggregate.call_args.args[0]
    stage = pipeline[0]["$vectorSearch"]
    assert stage["queryVector"] == QUERY_VECTOR
    assert stage["index"] == settings.PLOT_VECTOR_INDEX
    assert stage["path"] == settings.PLOT_EMBEDDING_PATH
    assert stage["limit"] == 5
    assert stage["numCandidates"] == 50


async def test_vector_search_rejects_bad_limit(client, embedding_service):
    response = await client.get("/api/embedded-movies/vector-search", params={"query": "heist", "limit": "-3"})

    assert response.status_code == 400
    assert response.json() == {"message": "limit must be a positive integer"}


async def test_vector_search_provider_failure_is_500(client, embedding_service):
    embedding_service.embed_query.side_effect = EmbeddingServiceError("Failed to generate embedding: timeout")

    response = await client.get("/api/embedded-movies/vector-search", params={"query": "heist"})

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to generate embedding: timeout"}


async def test_hybrid_search_applies_filters(client, fake_db, embedding_service):
    response = await client.get(
        "/api/embedded-movies/hybrid-search",
        params={"query": "space opera", "genre": "Sci-Fi", "year": "1977", "limit": "4"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["filters"] == {"genres": "Sci-Fi", "year": 1977}
    assert body["count"] == 0

    pipeline = fake_db["embedded_movies"].aggregate.call_args.args[0]
    assert pipeline[0]["$vectorSearch"]["filter"] == {"genres": "Sci-Fi", "year": 1977}
    assert pipeline[0]["$vectorSearch"]["limit"] == 8
    assert pipeline[1] == {"$match": {"genres": "Sci-Fi", "year": 1977}}
    assert pipeline[2] == {"$limit": 4}


async def test_hybrid_search_without_filters_skips_match(client, fake_db, embedding_service):
    await client.get("/api/embedded-movies/hybrid-search", params={"query": "space opera"})

    pipeline = fake_db["embedded_movies"].aggregate.call_args.args[0]
    assert "filter" not in pipeline[0]["$vectorSearch"]
    assert pipeline[1] == {"$limit": 10}


async def test_create_requires_title(client):
    response = await client.post("/api/embedded-movies", json={"plot": "A movie with no name"})

    assert response.status_code == 400


async def test_create_embedded_movie(client, fake_db):
    fake_db["embedded_movies"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    response = await client.post(
        "/api/embedded-movies", json={"title": "Alien", "genres": ["Horror", "Sci-Fi"], "year": 1979}
    )

    assert response.status_code == 201
    assert response.json()["genres"] == ["Horror", "Sci-Fi"]


async def test_hybrid_search_unparsable_year_is_read_failure(client, fake_db, embedding_service):
    response = await client.get("/api/embedded-movies/hybrid-search", params={"query": "heist", "year": "soon"})

    assert response.status_code == 500
    assert "year" in response.json()["message"]
    fake_db["embedded_movies"].aggregate.assert_not_called()


async def test_vector_search_uses_service_owned_field(client, fake_db, embedding_service):
    await client.get("/api/embedded-movies/vector-search", params={"query": "heist"})

    pipeline = fake_db["embedded_movies"].aggregate.call_args.args[0]
    assert pipeline[0]["$vectorSearch"]["path"] == "plot_embedding_openai"
    assert pipeline[0]["$vectorSearch"]["index"] == "plot_embedding_openai_index"
    assert pipeline[-1] == {
        "$project": {"plot_embedding": 0, "plot_embedding_voyage_3_large": 0, "plot_embedding_openai": 0}
    }
