from pathlib import Path
from typing import AsyncIterator, NamedTuple

from databases import Database
import httpx
import pytest
import pytest_asyncio

from dreamhost import config, db
from dreamhost.app import app
from dreamhost.auth import create_token
from dreamhost.domain.models import Drink, Meal, RecipeKind
from dreamhost.domain.repository import RecipesRepository
from dreamhost.domain.users import UsersRepository


MEALS = [
    {
        "name": f"M{i}",
        "category": f"Cat{i}",
        "area": f"A{i}",
        "instructions": f"Inst{i}",
        "thumbnail": f"http://M{i}.img",
        "ingredients": [f"Ing{i}a", f"Ing{i}b", f"Ing{i}c"],
    }
    for i in (1, 2, 3)
]


DRINKS = [
    {
        "name": f"D{i}",
        "category": f"Cat{i}",
        "type": f"T{i}",
        "glass": f"G{i}",
        "instructions": f"Inst{i}",
        "thumbnail": f"http://D{i}.img",
        "ingredients": [f"Ing{i}a", f"Ing{i}b", f"Ing{i}c"],
    }
    for i in (1, 2, 3)
]


PERSONAL_MEALS = [
    {
        "name": f"P-M{i}",
        "category": f"P-Cat{i}",
        "area": f"P-A{i}",
        "instructions": f"P-Inst{i}",
        "thumbnail": f"http://P-M{i}.img",
        "ingredients": [f"P-Ing{i}a", f"P-Ing{i}b"],
    }
    for i in (1, 2)
]


PERSONAL_DRINKS = [
    {
        "name": f"P-D{i}",
        "category": f"P-Cat{i}",
        "type": f"P-T{i}",
        "glass": f"P-G{i}",
        "instructions": f"P-Inst{i}",
        "thumbnail": f"http://P-D{i}.img",
        "ingredients": [f"P-Ing{i}a", f"P-Ing{i}b"],
    }
    for i in (1, 2)
]


USERS = [
    {
        "username": f"u{i}",
        "password": f"password{i}",
        "firstName": f"U{i}F",
        "lastName": f"U{i}L",
        "email": f"user{i}@user.com",
    }
    for i in (1, 2)
]


class Seed(NamedTuple):
    meals: list[Meal]
    drinks: list[Drink]
    personal_meals: list[Meal]
    personal_drinks: list[Drink]

    @property
    def meal_ids(self) -> list[int]:
        return [m.id for m in self.meals]

    @property
    def drink_ids(self) -> list[int]:
        return [d.id for d in self.drinks]

    def ids(self, kind: RecipeKind) -> list[int]:
        return self.meal_ids if kind is RecipeKind.meals else self.drink_ids

    def personal_ids(self, kind: RecipeKind) -> list[int]:
        recipes = self.personal_meals if kind is RecipeKind.meals else self.personal_drinks
        return [r.id for r in recipes]


@pytest.fixture
def cfg(tmp_path: Path) -> config.Config:
    return config.Config(
        env=config.Env.test,
        db_url=f"sqlite+aiosqlite:///{tmp_path / 'dreamhost_test.db'}",
        secret_key="secret-test",
    )


@pytest_asyncio.fixture
async def database(cfg: config.Config) -> AsyncIterator[Database]:
    database = Database(cfg.db_url)
    await database.connect()
    await db.create_db(database)
    yield database
    await database.disconnect()


@pytest.fixture
def users(database: Database, cfg: config.Config) -> UsersRepository:
    return UsersRepository(database, work_factor=cfg.work_factor)


@pytest_asyncio.fixture
async def seed(database: Database, users: UsersRepository) -> Seed:
    """Three meals and drinks, users u1 and u2, and u1's favorites and
    personal recipes."""
    meals_repo = RecipesRepository(database, RecipeKind.meals)
    drinks_repo = RecipesRepository(database, RecipeKind.drinks)
    meals = [await meals_repo.create(m) for m in MEALS]
    drinks = [await drinks_repo.create(d) for d in DRINKS]

    for user in USERS:
        await users.register(user)

    await users.mark_fav_meal("u1", meals[0].id)
    await users.mark_fav_drink("u1", drinks[0].id)

    personal_meals = [
        await users.create_personal_recipe(RecipeKind.meals, "u1", m)
        for m in PERSONAL_MEALS
    ]
    personal_drinks = [
        await users.create_personal_recipe(RecipeKind.drinks, "u1", d)
        for d in PERSONAL_DRINKS
    ]

    return Seed(
        meals=meals,  # pyright: ignore[reportArgumentType]
        drinks=drinks,  # pyright: ignore[reportArgumentType]
        personal_meals=personal_meals,  # pyright: ignore[reportArgumentType]
        personal_drinks=personal_drinks,  # pyright: ignore[reportArgumentType]
    )


@pytest_asyncio.fixture
async def client(
    cfg: config.Config,
    database: Database,
    seed: Seed,
) -> AsyncIterator[httpx.AsyncClient]:
    state_config, state_db = app.state.config, app.state.db
    app.state.config = cfg
    app.state.db = database
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.state.config, app.state.db = state_config, state_db


def bearer(cfg: config.Config, username: str) -> dict[str, str]:
    token = create_token(username, secret=cfg.secret_key, ttl=cfg.token_ttl)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def u1_auth(cfg: config.Config) -> dict[str, str]:
    return bearer(cfg, "u1")


@pytest.fixture
def u2_auth(cfg: config.Config) -> dict[str, str]:
    return bearer(cfg, "u2")
