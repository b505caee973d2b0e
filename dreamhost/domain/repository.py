"""Catalog and personal recipe repositories.

Both are written once over `RecipeKind` so meals and drinks share every query.
"""
from typing import Any, Mapping

from databases import Database

from dreamhost.db import as_dict
from dreamhost.domain.errors import DuplicateError, NotFoundError
from dreamhost.domain.models import Recipe, RecipeKind, dump_ingredients
from dreamhost.domain.sql import bind, placeholder, sql_for_partial_update


def to_columns(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Storage representation of recipe fields."""
    row = dict(fields)
    if "ingredients" in row:
        row["ingredients"] = dump_ingredients(row["ingredients"])
    return row


def _returning(kind: RecipeKind) -> str:
    return ", ".join(("id",) + kind.fields)


class RecipesRepository:
    """Shared catalog of meals or drinks."""

    def __init__(self, db: Database, kind: RecipeKind) -> None:
        self.db = db
        self.kind = kind

    async def create(self, fields: Mapping[str, Any]) -> Recipe:
        """Store a new recipe and return it with its generated id.

        Raises `DuplicateError` when a recipe with the same name exists. The
        unique constraint on `name` still guards against two concurrent
        creates slipping past this check.
        """
        duplicate = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT name FROM {self.kind.table} WHERE name = :p1",
            values=bind([fields["name"]]),
        )
        if duplicate is not None:
            raise DuplicateError(f"Duplicate {self.kind.label}: {fields['name']}")

        row = to_columns(fields)
        values = [row.get(field) for field in self.kind.fields]
        query = (
            f"INSERT INTO {self.kind.table} ({', '.join(self.kind.fields)}) "
            f"VALUES ({', '.join(placeholder(i) for i in range(1, len(values) + 1))}) "
            f"RETURNING {_returning(self.kind)}"
        )
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            query, values=bind(values)
        )
        assert result is not None
        return self.kind.from_row(as_dict(result))

    async def find_all(self, filters: Mapping[str, str] | None = None) -> list[Recipe]:
        """All recipes ordered by name.

        Each non-empty filter on one of the kind's search fields narrows the
        result to case-insensitive partial matches.
        """
        filters = {} if filters is None else filters
        where: list[str] = []
        values: list[str] = []
        for field in self.kind.search_fields:
            term = filters.get(field)
            if term:
                values.append(f"%{term.lower()}%")
                where.append(f"LOWER({field}) LIKE {placeholder(len(values))}")

        query = f"SELECT {_returning(self.kind)} FROM {self.kind.table}"
        if where:
            query += " WHERE " + " AND ".join(where)
        query += " ORDER BY name"

        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            query, values=bind(values)
        )
        return [self.kind.from_row(as_dict(r)) for r in result]

    async def categories(self) -> list[dict[str, Any]]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT category, COUNT(*) AS count FROM {self.kind.table} "
            "GROUP BY category ORDER BY category"
        )
        return [as_dict(r) for r in result]

    async def count(self) -> int:
        result = await self.db.fetch_val(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT COUNT(*) FROM {self.kind.table}"
        )
        return int(result)

    async def get(self, id: int) -> Recipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {_returning(self.kind)} FROM {self.kind.table} WHERE id = :p1",
            values=bind([id]),
        )
        if result is None:
            raise NotFoundError(f"No {self.kind.label}: {id}")
        return self.kind.from_row(as_dict(result))

    async def update(self, id: int, fields: Mapping[str, Any]) -> Recipe:
        update = sql_for_partial_update(to_columns(fields))
        query = (
            f"UPDATE {self.kind.table} SET {update.set_cols} "
            f"WHERE id = {update.placeholder()} "
            f"RETURNING {_returning(self.kind)}"
        )
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            query, values=update.params(id)
        )
        if result is None:
            raise NotFoundError(f"No {self.kind.label}: {id}")
        return self.kind.from_row(as_dict(result))

    async def remove(self, id: int) -> None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"DELETE FROM {self.kind.table} WHERE id = :p1 RETURNING id",
            values=bind([id]),
        )
        if result is None:
            raise NotFoundError(f"No {self.kind.label}: {id}")


class PersonalRecipesRepository:
    """Recipes privately owned by one user. Every query is scoped by owner."""

    def __init__(self, db: Database, kind: RecipeKind) -> None:
        self.db = db
        self.kind = kind

    def _not_found(self, id: int) -> NotFoundError:
        return NotFoundError(f"No personal {self.kind.label}: {id}")

    async def find_all(self, username: str) -> list[Recipe]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {_returning(self.kind)} FROM {self.kind.personal_table} "
            "WHERE username = :p1 ORDER BY name",
            values=bind([username]),
        )
        return [self.kind.from_row(as_dict(r)) for r in result]

    async def create(self, username: str, fields: Mapping[str, Any]) -> Recipe:
        row = to_columns(fields)
        columns = self.kind.fields + ("username",)
        values = [row.get(field) for field in self.kind.fields] + [username]
        query = (
            f"INSERT INTO {self.kind.personal_table} ({', '.join(columns)}) "
            f"VALUES ({', '.join(placeholder(i) for i in range(1, len(values) + 1))}) "
            f"RETURNING {_returning(self.kind)}"
        )
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            query, values=bind(values)
        )
        assert result is not None
        return self.kind.from_row(as_dict(result))

    async def get(self, id: int, username: str) -> Recipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {_returning(self.kind)} FROM {self.kind.personal_table} "
            "WHERE id = :p1 AND username = :p2",
            values=bind([id, username]),
        )
        if result is None:
            raise self._not_found(id)
        return self.kind.from_row(as_dict(result))

    async def update(
        self,
        id: int,
        username: str,
        fields: Mapping[str, Any],
    ) -> Recipe:
        update = sql_for_partial_update(to_columns(fields))
        query = (
            f"UPDATE {self.kind.personal_table} SET {update.set_cols} "
            f"WHERE id = {update.placeholder(1)} AND username = {update.placeholder(2)} "
            f"RETURNING {_returning(self.kind)}"
        )
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            query, values=update.params(id, username)
        )
        if result is None:
            raise self._not_found(id)
        return self.kind.from_row(as_dict(result))

    async def remove(self, id: int, username: str) -> None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"DELETE FROM {self.kind.personal_table} "
            "WHERE id = :p1 AND username = :p2 RETURNING id",
            values=bind([id, username]),
        )
        if result is None:
            raise self._not_found(id)
