"""Seed the catalog from TheMealDB and TheCocktailDB.

    python -m dreamhost.importer

Best effort and one-shot: every letter of the alphabet is searched, every
result normalized and created. Recipes whose name is already stored are
skipped.
"""
import asyncio
import logging
import string
from typing import Any

from databases import Database
import httpx
from rich import print

from dreamhost import config, db
from dreamhost.domain.errors import DuplicateError
from dreamhost.domain.models import RecipeKind
from dreamhost.domain.repository import RecipesRepository


logger = logging.getLogger(__name__)


TIMEOUT = 20
MEAL_INGREDIENTS = 20
DRINK_INGREDIENTS = 15


def ingredients(data: dict[str, Any], n: int) -> list[str]:
    """`strMeasureN strIngredientN` for every ingredient that is present."""
    result: list[str] = []
    for i in range(1, n + 1):
        ingredient = data.get(f"strIngredient{i}")
        if ingredient and ingredient.strip():
            measure = data.get(f"strMeasure{i}") or ""
            result.append(f"{measure.strip()} {ingredient.strip()}".strip())
    return result


def make_meal(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": data["strMeal"],
        "category": data.get("strCategory") or "",
        "area": data.get("strArea") or "",
        "instructions": data.get("strInstructions") or "",
        "thumbnail": data.get("strMealThumb"),
        "ingredients": ingredients(data, MEAL_INGREDIENTS),
    }


def make_drink(data: dict[str, Any]) -> dict[str, Any]:
    return {
        "name": data["strDrink"],
        "category": data.get("strCategory") or "",
        "type": data.get("strAlcoholic") or "",
        "glass": data.get("strGlass"),
        "instructions": data.get("strInstructions") or "",
        "thumbnail": data.get("strDrinkThumb"),
        "ingredients": ingredients(data, DRINK_INGREDIENTS),
    }


NORMALIZERS = {
    RecipeKind.meals: make_meal,
    RecipeKind.drinks: make_drink,
}


async def fetch_letter(
    kind: RecipeKind,
    letter: str,
    *,
    client: httpx.AsyncClient,
) -> list[dict[str, Any]]:
    resp = await client.get("search.php", params={"f": letter})
    resp.raise_for_status()
    # the API answers {"meals": null} rather than an empty list
    records = resp.json().get(kind.value) or []
    logger.debug("%s %s: %d", kind.value, letter, len(records))
    return [NORMALIZERS[kind](r) for r in records]


async def fetch_recipes(
    kind: RecipeKind,
    *,
    client: httpx.AsyncClient,
) -> list[dict[str, Any]]:
    coros = [
        fetch_letter(kind, letter, client=client) for letter in string.ascii_lowercase
    ]
    batches = await asyncio.gather(*coros)
    return [recipe for batch in batches for recipe in batch]


async def dump(
    recipes: list[dict[str, Any]],
    *,
    repository: RecipesRepository,
) -> tuple[int, int]:
    """Create each recipe in turn. Returns (created, skipped)."""
    created = skipped = 0
    for recipe in recipes:
        try:
            await repository.create(recipe)
        except DuplicateError as e:
            logger.info("Skipping %s", e.message)
            skipped += 1
        else:
            created += 1
    return created, skipped


def client_factory(kind: RecipeKind, cfg: config.Config) -> httpx.AsyncClient:
    base_url = cfg.meal_base_url if kind is RecipeKind.meals else cfg.drink_base_url
    return httpx.AsyncClient(base_url=base_url, timeout=TIMEOUT)


async def main(cfg: config.Config | None = None) -> None:
    cfg = config.Config() if cfg is None else cfg
    logging.basicConfig(level=cfg.log_level)

    database = Database(cfg.db_url)
    await database.connect()
    try:
        await db.create_db(database)
        for kind in RecipeKind:
            async with client_factory(kind, cfg) as client:
                recipes = await fetch_recipes(kind, client=client)
            repository = RecipesRepository(database, kind)
            created, skipped = await dump(recipes, repository=repository)
            total = await repository.count()
            print(
                f"[green]{kind.value}[/green]: fetched {len(recipes)}, "
                f"created {created}, skipped {skipped}, stored {total}"
            )
    finally:
        await database.disconnect()


if __name__ == "__main__":
    asyncio.run(main())
