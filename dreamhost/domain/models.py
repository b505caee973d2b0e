from enum import Enum
import json
from typing import Any, Mapping, Self


class Meal:
    fields = ("name", "category", "area", "instructions", "thumbnail", "ingredients")
    search_fields = ("name", "category", "area")

    def __init__(
        self,
        *,
        id: int,
        name: str,
        category: str,
        area: str,
        instructions: str,
        thumbnail: str | None,
        ingredients: list[str],
    ) -> None:
        self.id = id
        self.name = name
        self.category = category
        self.area = area
        self.instructions = instructions
        self.thumbnail = thumbnail
        self.ingredients = ingredients

    def __repr__(self) -> str:
        return f"<Meal(id={self.id}, name={self.name})>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Meal) and self.to_dict() == other.to_dict()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        return cls(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            area=row["area"],
            instructions=row["instructions"],
            thumbnail=row["thumbnail"],
            ingredients=load_ingredients(row["ingredients"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "area": self.area,
            "instructions": self.instructions,
            "thumbnail": self.thumbnail,
            "ingredients": self.ingredients,
        }


class Drink:
    fields = (
        "name",
        "category",
        "type",
        "glass",
        "instructions",
        "thumbnail",
        "ingredients",
    )
    search_fields = ("name", "category", "type")

    def __init__(
        self,
        *,
        id: int,
        name: str,
        category: str,
        type: str,
        glass: str | None,
        instructions: str,
        thumbnail: str | None,
        ingredients: list[str],
    ) -> None:
        self.id = id
        self.name = name
        self.category = category
        self.type = type
        self.glass = glass
        self.instructions = instructions
        self.thumbnail = thumbnail
        self.ingredients = ingredients

    def __repr__(self) -> str:
        return f"<Drink(id={self.id}, name={self.name})>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Drink) and self.to_dict() == other.to_dict()

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        return cls(
            id=row["id"],
            name=row["name"],
            category=row["category"],
            type=row["type"],
            glass=row["glass"],
            instructions=row["instructions"],
            thumbnail=row["thumbnail"],
            ingredients=load_ingredients(row["ingredients"]),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "type": self.type,
            "glass": self.glass,
            "instructions": self.instructions,
            "thumbnail": self.thumbnail,
            "ingredients": self.ingredients,
        }


type Recipe = Meal | Drink


class RecipeKind(Enum):
    """The two shapes of recipe, and where each one lives in the store."""

    meals = "meals"
    drinks = "drinks"

    @property
    def model(self) -> type[Meal] | type[Drink]:
        return Meal if self is RecipeKind.meals else Drink

    @property
    def label(self) -> str:
        return "meal" if self is RecipeKind.meals else "drink"

    @property
    def fields(self) -> tuple[str, ...]:
        return self.model.fields

    @property
    def search_fields(self) -> tuple[str, ...]:
        return self.model.search_fields

    @property
    def table(self) -> str:
        return self.value

    @property
    def personal_table(self) -> str:
        return f"personal_{self.value}"

    @property
    def favorites_table(self) -> str:
        return f"favorite_{self.value}"

    @property
    def favorite_column(self) -> str:
        return f"{self.label}_id"

    def from_row(self, row: Mapping[str, Any]) -> Recipe:
        return self.model.from_row(row)


class User:
    def __init__(
        self,
        *,
        username: str,
        first_name: str,
        last_name: str,
        email: str,
        fav_meals: list[int] | None = None,
        fav_drinks: list[int] | None = None,
    ) -> None:
        self.username = username
        self.first_name = first_name
        self.last_name = last_name
        self.email = email
        self.fav_meals = fav_meals
        self.fav_drinks = fav_drinks

    def __repr__(self) -> str:
        return f"<User(username={self.username})>"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        return cls(
            username=row["username"],
            first_name=row["firstName"],
            last_name=row["lastName"],
            email=row["email"],
        )

    def to_dict(self) -> dict[str, Any]:
        user: dict[str, Any] = {
            "username": self.username,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
        }
        if self.fav_meals is not None:
            user["favMeals"] = self.fav_meals
        if self.fav_drinks is not None:
            user["favDrinks"] = self.fav_drinks
        return user


def dump_ingredients(ingredients: list[str]) -> str:
    return json.dumps(ingredients)


def load_ingredients(raw: str | list[str]) -> list[str]:
    return raw if isinstance(raw, list) else json.loads(raw)
