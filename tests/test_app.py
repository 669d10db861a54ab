from httpx import ASGITransport, AsyncClient


async def test_root_lists_endpoints(client):
    response = await client.get("/")

    body = response.json()
    assert body["name"] == "MFlix API"
    assert body["endpoints"]["users"] == "/api/users"
    assert body["endpoints"]["embeddedMovies"] == "/api/embedded-movies"


async def test_unknown_route(client):
    response = await client.get("/api/directors")

    assert response.status_code == 404
    assert response.json() == {"message": "Route not found"}


async def test_unsupported_method_keeps_status(client):
    response = await client.patch("/api/users")

    assert response.status_code == 405
    assert response.json()["message"]


async def test_unhandled_error_is_generic_500(app):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret detail")

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        response = await http_client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"message": "Internal server error"}


async def test_liveness(client):
    response = await client.get("/health/live")

    assert response.json() == {"status": "alive"}


async def test_readiness_pings_database(client, fake_db):
    response = await client.get("/health/ready")

    assert response.status_code == 200
    fake_db.command.assert_awaited_once_with("ping")


async def test_readiness_reports_unreachable_database(client, fake_db):
    from pymongo.errors import ServerSelectionTimeoutError

    fake_db.command.side_effect = ServerSelectionTimeoutError("no servers")

    response = await client.get("/health/ready")

    assert response.status_code == 503
    assert response.json()["mongo"] == "unreachable"
