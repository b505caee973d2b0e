"""Shapes of request bodies and query strings.

Bodies are checked here before anything reaches a repository. Update models
only report the fields the client actually sent.
"""
from typing import Annotated, Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from dreamhost.domain.models import RecipeKind


Text = Annotated[str, StringConstraints(min_length=1)]
Username = Annotated[str, StringConstraints(min_length=1, max_length=25)]
Password = Annotated[str, StringConstraints(min_length=5, max_length=20)]
Email = Annotated[str, StringConstraints(min_length=6, max_length=60, pattern=r".+@.+")]


class Schema(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def fields(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class PartialSchema(Schema):
    """All fields optional; only nullable ones may be sent as null."""

    nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _no_nulls(self) -> Self:
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in self.nullable:
                raise ValueError(f"{name} may not be null")
        return self

    def fields(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class MealNew(Schema):
    name: Text
    category: Text
    area: Text
    instructions: Text
    thumbnail: str | None = None
    ingredients: list[str]


class MealUpdate(PartialSchema):
    nullable = frozenset({"thumbnail"})

    name: Text | None = None
    category: Text | None = None
    area: Text | None = None
    instructions: Text | None = None
    thumbnail: str | None = None
    ingredients: list[str] | None = None


class MealSearch(Schema):
    name: str | None = None
    category: str | None = None
    area: str | None = None


class DrinkNew(Schema):
    name: Text
    category: Text
    type: Text
    glass: str | None = None
    instructions: Text
    thumbnail: str | None = None
    ingredients: list[str]


class DrinkUpdate(PartialSchema):
    nullable = frozenset({"glass", "thumbnail"})

    name: Text | None = None
    category: Text | None = None
    type: Text | None = None
    glass: str | None = None
    instructions: Text | None = None
    thumbnail: str | None = None
    ingredients: list[str] | None = None


class DrinkSearch(Schema):
    name: str | None = None
    category: str | None = None
    type: str | None = None


class UserAuth(Schema):
    username: Username
    password: Text


class UserRegister(Schema):
    username: Username
    password: Password
    first_name: Annotated[str, StringConstraints(min_length=1, max_length=30)] = Field(
        alias="firstName"
    )
    last_name: Annotated[str, StringConstraints(min_length=1, max_length=30)] = Field(
        alias="lastName"
    )
    email: Email


class UserUpdate(PartialSchema):
    first_name: Annotated[str, StringConstraints(min_length=1, max_length=30)] | None = (
        Field(None, alias="firstName")
    )
    last_name: Annotated[str, StringConstraints(min_length=1, max_length=30)] | None = (
        Field(None, alias="lastName")
    )
    password: Password | None = None
    email: Email | None = None


NEW: dict[RecipeKind, type[Schema]] = {
    RecipeKind.meals: MealNew,
    RecipeKind.drinks: DrinkNew,
}


UPDATE: dict[RecipeKind, type[PartialSchema]] = {
    RecipeKind.meals: MealUpdate,
    RecipeKind.drinks: DrinkUpdate,
}


SEARCH: dict[RecipeKind, type[Schema]] = {
    RecipeKind.meals: MealSearch,
    RecipeKind.drinks: DrinkSearch,
}
