import math
from unittest.mock import MagicMock

from bson import ObjectId


def _users(count):
    return [{"_id": ObjectId(), "name": f"user{i}", "email": f"user{i}@example.com"} for i in range(count)]


async def test_list_defaults_to_first_page(client, fake_db):
    users = fake_db["users"]
    users.find.return_value.to_list.return_value = _users(10)
    users.count_documents.return_value = 20

    response = await client.get("/api/users")

    assert response.status_code == 200
    body = response.json()
    assert body["currentPage"] == 1
    assert body["totalPages"] == 2
    assert body["totalUsers"] == 20
    assert len(body["users"]) == 10
    users.find.return_value.skip.assert_called_with(0)
    users.find.return_value.limit.assert_called_with(10)


async def test_list_second_page(client, fake_db):
    users = fake_db["users"]
    users.find.return_value.to_list.return_value = _users(5)
    users.count_documents.return_value = 15

    response = await client.get("/api/users", params={"page": "2", "limit": "5"})

    body = response.json()
    assert body["currentPage"] == 2
    assert body["totalPages"] == 3
    users.find.return_value.skip.assert_called_with(5)


async def test_list_with_garbage_page_uses_first_page(client, fake_db):
    response = await client.get("/api/users", params={"page": "abc"})

    assert response.status_code == 200
    assert response.json()["currentPage"] == 1


async def test_list_negative_limit_with_no_records(client, fake_db):
    response = await client.get("/api/users", params={"limit": "-5"})

    assert response.status_code == 200
    total = response.json()["totalPages"]
    assert total == 0
    assert math.copysign(1.0, total) == -1.0


async def test_list_store_failure_is_500(client, fake_db):
    fake_db["users"].count_documents.side_effect = RuntimeError("not primary")

    response = await client.get("/api/users")

    assert response.status_code == 500
    assert response.json() == {"message": "not primary"}


async def test_get_missing_user_is_404(client):
    response = await client.get(f"/api/users/{ObjectId()}")

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


async def test_get_user(client, fake_db):
    oid = ObjectId()
    fake_db["users"].find_one.return_value = {"_id": oid, "name": "Ned Stark", "email": "ned@example.com"}

    response = await client.get(f"/api/users/{oid}")

    assert response.status_code == 200
    assert response.json()["_id"] == str(oid)
    fake_db["users"].find_one.assert_awaited_with({"_id": oid})


async def test_get_malformed_id_is_500(client):
    response = await client.get("/api/users/not-an-id")

    assert response.status_code == 500
    assert response.json()["message"]


async def test_create_user(client, fake_db):
    oid = ObjectId()
    fake_db["users"].insert_one.return_value = MagicMock(inserted_id=oid)

    response = await client.post(
        "/api/users", json={"name": "Arya", "email": "arya@example.com", "password": "needle", "_id": "ignored"}
    )

    assert response.status_code == 201
    body = response.json()
    assert body["_id"] == str(oid)
    assert body["email"] == "arya@example.com"
    inserted = fake_db["users"].insert_one.await_args.args[0]
    assert "_id" not in inserted or inserted["_id"] == oid


async def test_create_without_email_is_400(client, fake_db):
    response = await client.post("/api/users", json={"name": "Arya", "password": "needle"})

    assert response.status_code == 400
    assert "email" in response.json()["message"]
    fake_db["users"].insert_one.assert_not_awaited()


async def test_create_with_malformed_json_is_400(client):
    response = await client.post(
        "/api/users", content=b"{not json", headers={"Content-Type": "application/json"}
    )

    assert response.status_code == 400
    assert response.json()["message"]


async def test_create_duplicate_email_is_400(client, fake_db):
    fake_db["users"].insert_one.side_effect = RuntimeError("E11000 duplicate key error")

    response = await client.post("/api/users", json={"name": "A", "email": "a@example.com", "password": "x"})

    assert response.status_code == 400
    assert "E11000" in response.json()["message"]


async def test_update_returns_post_update_state(client, fake_db):
    oid = ObjectId()
    fake_db["users"].find_one_and_update.return_value = {"_id": oid, "name": "Renamed", "email": "a@example.com"}

    response = await client.put(f"/api/users/{oid}", json={"name": "Renamed"})

    assert response.status_code == 200
    assert response.json()["name"] == "Renamed"
    args = fake_db["users"].find_one_and_update.await_args.args
    assert args == ({"_id": oid}, {"$set": {"name": "Renamed"}})


async def test_update_cannot_clear_required_field(client, fake_db):
    response = await client.put(f"/api/users/{ObjectId()}", json={"email": None})

    assert response.status_code == 400
    assert "Path(s) email are required and cannot be null" in response.json()["message"]
    fake_db["users"].find_one_and_update.assert_not_awaited()


async def test_update_missing_user_is_404(client):
    response = await client.put(f"/api/users/{ObjectId()}", json={"name": "Nobody"})

    assert response.status_code == 404
    assert response.json() == {"message": "User not found"}


async def test_update_malformed_id_is_400(client):
    response = await client.put("/api/users/xyz", json={"name": "Nobody"})

    assert response.status_code == 400


async def test_delete_user(client, fake_db):
    oid = ObjectId()
    fake_db["users"].find_one_and_delete.return_value = {"_id": oid}

    response = await client.delete(f"/api/users/{oid}")

    assert response.status_code == 200
    assert response.json() == {"message": "User deleted successfully"}


async def test_delete_missing_user_is_404_every_time(client):
    missing = ObjectId()

    first = await client.delete(f"/api/users/{missing}")
    second = await client.delete(f"/api/users/{missing}")

    assert first.status_code == second.status_code == 404
    assert first.json() == second.json() == {"message": "User not found"}


async def test_create_accepts_any_email_string(client, fake_db):
    fake_db["users"].insert_one.return_value = MagicMock(inserted_id=ObjectId())

    response = await client.post("/api/users", json={"name": "admin", "email": "admin@localhost", "password": "x"})

    assert response.status_code == 201
    assert response.json()["email"] == "admin@localhost"
