import httpx
import pytest

from dreamhost.auth import decode_token
from dreamhost.config import Config

from conftest import Seed


NEW_USER = {
    "username": "new",
    "password": "password",
    "firstName": "New",
    "lastName": "User",
    "email": "new@user.com",
}


# /auth


@pytest.mark.asyncio
async def test_auth_token(client: httpx.AsyncClient, cfg: Config) -> None:
    resp = await client.post(
        "/auth/token", json={"username": "u1", "password": "password1"}
    )
    assert resp.status_code == 200
    claims = decode_token(resp.json()["token"], secret=cfg.secret_key)
    assert claims["username"] == "u1"


@pytest.mark.parametrize(
    "creds",
    (
        {"username": "u1", "password": "wrong"},
        {"username": "nope", "password": "password1"},
    ),
)
@pytest.mark.asyncio
async def test_auth_token_unauthorized(
    client: httpx.AsyncClient,
    creds: dict[str, str],
) -> None:
    resp = await client.post("/auth/token", json=creds)
    assert resp.status_code == 401
    assert resp.json() == {
        "error": {"message": "Invalid username/password", "status": 401}
    }


@pytest.mark.asyncio
async def test_auth_token_invalid(client: httpx.AsyncClient) -> None:
    resp = await client.post("/auth/token", json={"username": 42})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_auth_register(client: httpx.AsyncClient, cfg: Config) -> None:
    resp = await client.post("/auth/register", json=NEW_USER)
    assert resp.status_code == 201
    token = resp.json()["token"]
    assert decode_token(token, secret=cfg.secret_key)["username"] == "new"

    resp = await client.get(
        "/users/new", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.json() == {
        "user": {
            "username": "new",
            "firstName": "New",
            "lastName": "User",
            "email": "new@user.com",
            "favMeals": [],
            "favDrinks": [],
        }
    }


@pytest.mark.asyncio
async def test_auth_register_duplicate(client: httpx.AsyncClient) -> None:
    resp = await client.post("/auth/register", json={**NEW_USER, "username": "u1"})
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Duplicate username: u1"


@pytest.mark.parametrize(
    "change",
    (
        {"password": "1234"},
        {"email": "not-an-email"},
        {"firstName": ""},
        {"isAdmin": True},
    ),
)
@pytest.mark.asyncio
async def test_auth_register_invalid(
    client: httpx.AsyncClient,
    change: dict[str, object],
) -> None:
    resp = await client.post("/auth/register", json={**NEW_USER, **change})
    assert resp.status_code == 400


# /users


@pytest.mark.asyncio
async def test_user_list(client: httpx.AsyncClient, u1_auth: dict[str, str]) -> None:
    resp = await client.get("/users", headers=u1_auth)
    assert [u["username"] for u in resp.json()["users"]] == ["u1", "u2"]


@pytest.mark.asyncio
async def test_user_list_anon(client: httpx.AsyncClient) -> None:
    resp = await client.get("/users")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_user_detail(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
    seed: Seed,
) -> None:
    resp = await client.get("/users/u1", headers=u1_auth)
    assert resp.json() == {
        "user": {
            "username": "u1",
            "firstName": "U1F",
            "lastName": "U1L",
            "email": "user1@user.com",
            "favMeals": [seed.meal_ids[0]],
            "favDrinks": [seed.drink_ids[0]],
        }
    }


@pytest.mark.parametrize("method", ("GET", "PATCH", "DELETE"))
@pytest.mark.asyncio
async def test_user_other_user(
    client: httpx.AsyncClient,
    u2_auth: dict[str, str],
    method: str,
) -> None:
    resp = await client.request(
        method, "/users/u1", json={"firstName": "x"}, headers=u2_auth
    )
    assert resp.status_code == 401


@pytest.mark.parametrize("method", ("GET", "PATCH", "DELETE"))
@pytest.mark.asyncio
async def test_user_anon(client: httpx.AsyncClient, method: str) -> None:
    resp = await client.request(method, "/users/u1", json={"firstName": "x"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_user_update(client: httpx.AsyncClient, u1_auth: dict[str, str]) -> None:
    resp = await client.patch(
        "/users/u1",
        json={"firstName": "NewF", "password": "new-password"},
        headers=u1_auth,
    )
    assert resp.json() == {
        "user": {
            "username": "u1",
            "firstName": "NewF",
            "lastName": "U1L",
            "email": "user1@user.com",
        }
    }

    resp = await client.post(
        "/auth/token", json={"username": "u1", "password": "new-password"}
    )
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "data",
    ({}, {"username": "renamed"}, {"email": None}, {"password": "1"}),
)
@pytest.mark.asyncio
async def test_user_update_invalid(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
    data: dict[str, object],
) -> None:
    resp = await client.patch("/users/u1", json=data, headers=u1_auth)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_user_remove(client: httpx.AsyncClient, u1_auth: dict[str, str]) -> None:
    resp = await client.delete("/users/u1", headers=u1_auth)
    assert resp.json() == {"deleted": "u1"}

    resp = await client.post(
        "/auth/token", json={"username": "u1", "password": "password1"}
    )
    assert resp.status_code == 401


# /users/{username}/{kind}/personal


@pytest.mark.parametrize("kind,prefix", (("meals", "P-M"), ("drinks", "P-D")))
@pytest.mark.asyncio
async def test_personal_list(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
    kind: str,
    prefix: str,
) -> None:
    resp = await client.get(f"/users/u1/{kind}/personal", headers=u1_auth)
    names = [r["name"] for r in resp.json()["personalRecipes"]]
    assert names == [f"{prefix}1", f"{prefix}2"]


@pytest.mark.asyncio
async def test_personal_list_other_user(
    client: httpx.AsyncClient,
    u2_auth: dict[str, str],
) -> None:
    resp = await client.get("/users/u1/meals/personal", headers=u2_auth)
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_personal_unknown_kind(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
) -> None:
    resp = await client.get("/users/u1/snacks/personal", headers=u1_auth)
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "No recipe type: snacks"


@pytest.mark.asyncio
async def test_personal_crud(client: httpx.AsyncClient, u2_auth: dict[str, str]) -> None:
    drink = {
        "name": "Mine",
        "category": "Cat",
        "type": "Alcoholic",
        "glass": None,
        "instructions": "Shake",
        "thumbnail": None,
        "ingredients": ["1 oz Gin"],
    }
    resp = await client.post("/users/u2/drinks/personal", json=drink, headers=u2_auth)
    assert resp.status_code == 201
    created = resp.json()["personalRecipe"]
    assert created == {"id": created["id"], **drink}
    path = f"/users/u2/drinks/personal/{created['id']}"

    resp = await client.get(path, headers=u2_auth)
    assert resp.json() == {"personalRecipe": created}

    resp = await client.patch(path, json={"glass": "Coupe"}, headers=u2_auth)
    assert resp.json() == {"personalRecipe": {**created, "glass": "Coupe"}}

    resp = await client.delete(path, headers=u2_auth)
    assert resp.json() == {"deleted": created["id"]}

    resp = await client.get(path, headers=u2_auth)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_personal_belongs_to_owner(
    client: httpx.AsyncClient,
    u2_auth: dict[str, str],
    seed: Seed,
) -> None:
    id = seed.personal_meals[0].id
    path = f"/users/u2/meals/personal/{id}"
    assert (await client.get(path, headers=u2_auth)).status_code == 404
    resp = await client.patch(path, json={"name": "Stolen"}, headers=u2_auth)
    assert resp.status_code == 404
    assert (await client.delete(path, headers=u2_auth)).status_code == 404


@pytest.mark.asyncio
async def test_personal_update_no_data(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
    seed: Seed,
) -> None:
    resp = await client.patch(
        f"/users/u1/meals/personal/{seed.personal_meals[0].id}",
        json={},
        headers=u1_auth,
    )
    assert resp.status_code == 400


# /users/{username}/{kind}/{id}/add|remove


@pytest.mark.asyncio
async def test_favorite_add_remove(
    client: httpx.AsyncClient,
    u2_auth: dict[str, str],
    seed: Seed,
) -> None:
    id = seed.meal_ids[1]
    resp = await client.post(f"/users/u2/meals/{id}/add", headers=u2_auth)
    assert resp.json() == {"favorited": True, "mealId": id}
    resp = await client.post(f"/users/u2/meals/{id}/add", headers=u2_auth)
    assert resp.status_code == 200

    resp = await client.get("/users/u2", headers=u2_auth)
    assert resp.json()["user"]["favMeals"] == [id]

    resp = await client.post(f"/users/u2/meals/{id}/remove", headers=u2_auth)
    assert resp.json() == {"favorited": False, "mealId": id}

    resp = await client.get("/users/u2", headers=u2_auth)
    assert resp.json()["user"]["favMeals"] == []


@pytest.mark.asyncio
async def test_favorite_drink(
    client: httpx.AsyncClient,
    u2_auth: dict[str, str],
    seed: Seed,
) -> None:
    id = seed.drink_ids[2]
    resp = await client.post(f"/users/u2/drinks/{id}/add", headers=u2_auth)
    assert resp.json() == {"favorited": True, "drinkId": id}


@pytest.mark.asyncio
async def test_favorite_unknown_action(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
    seed: Seed,
) -> None:
    resp = await client.post(f"/users/u1/meals/{seed.meal_ids[0]}/toggle", headers=u1_auth)
    assert resp.status_code == 400
    assert resp.json()["error"]["message"] == "Unknown action: toggle"


@pytest.mark.asyncio
async def test_favorite_no_such_meal(
    client: httpx.AsyncClient,
    u1_auth: dict[str, str],
) -> None:
    resp = await client.post("/users/u1/meals/0/add", headers=u1_auth)
    assert resp.status_code == 404
    assert resp.json()["error"]["message"] == "No meal: 0"


@pytest.mark.asyncio
async def test_favorite_other_user(
    client: httpx.AsyncClient,
    u2_auth: dict[str, str],
    seed: Seed,
) -> None:
    resp = await client.post(f"/users/u1/meals/{seed.meal_ids[1]}/add", headers=u2_auth)
    assert resp.status_code == 401
