import functools
from typing import Any, Mapping

from databases import Database

from dreamhost.db import as_dict
from dreamhost.domain.errors import DuplicateError, NotFoundError, UnauthorizedError
from dreamhost.domain.models import Recipe, RecipeKind, User
from dreamhost.domain.passwords import check_password, hash_password
from dreamhost.domain.repository import PersonalRecipesRepository
from dreamhost.domain.sql import bind, sql_for_partial_update


USER_COLUMNS = 'username, first_name AS "firstName", last_name AS "lastName", email'


class UsersRepository:
    """Users, their favorites and their personal recipes.

    Passwords are only ever read to be compared; no `User` handed back from
    here carries one.
    """

    columns = {"firstName": "first_name", "lastName": "last_name"}

    def __init__(self, db: Database, *, work_factor: int = 12) -> None:
        self.db = db
        self.work_factor = work_factor

    async def authenticate(self, username: str, password: str) -> User:
        """Raises `UnauthorizedError` for an unknown user or a wrong password
        alike, so callers can't tell which usernames exist."""
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT password, {USER_COLUMNS} FROM users WHERE username = :p1",
            values=bind([username]),
        )
        if result is not None:
            row = as_dict(result)
            if await check_password(password, row["password"]):
                return User.from_row(row)

        raise UnauthorizedError("Invalid username/password")

    async def register(self, fields: Mapping[str, Any]) -> User:
        username = fields["username"]
        duplicate = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            "SELECT username FROM users WHERE username = :p1",
            values=bind([username]),
        )
        if duplicate is not None:
            raise DuplicateError(f"Duplicate username: {username}")

        hashed = await hash_password(fields["password"], work_factor=self.work_factor)
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            "INSERT INTO users (username, password, first_name, last_name, email) "
            "VALUES (:p1, :p2, :p3, :p4, :p5) "
            f"RETURNING {USER_COLUMNS}",
            values=bind(
                [
                    username,
                    hashed,
                    fields["firstName"],
                    fields["lastName"],
                    fields["email"],
                ]
            ),
        )
        assert result is not None
        return User.from_row(as_dict(result))

    async def find_all(self) -> list[User]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {USER_COLUMNS} FROM users ORDER BY username"
        )
        return [User.from_row(as_dict(r)) for r in result]

    async def get(self, username: str) -> User:
        """User with the ids of their favorite meals and drinks."""
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {USER_COLUMNS} FROM users WHERE username = :p1",
            values=bind([username]),
        )
        if result is None:
            raise NotFoundError(f"No user: {username}")

        user = User.from_row(as_dict(result))
        user.fav_meals = await self._favorite_ids(RecipeKind.meals, username)
        user.fav_drinks = await self._favorite_ids(RecipeKind.drinks, username)
        return user

    async def update(self, username: str, fields: Mapping[str, Any]) -> User:
        """Partial update of firstName, lastName, email and password.

        Callers must have validated `fields`: any key here becomes a column.
        """
        data = dict(fields)
        if data.get("password"):
            data["password"] = await hash_password(
                data["password"], work_factor=self.work_factor
            )

        update = sql_for_partial_update(data, self.columns)
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"UPDATE users SET {update.set_cols} "
            f"WHERE username = {update.placeholder()} "
            f"RETURNING {USER_COLUMNS}",
            values=update.params(username),
        )
        if result is None:
            raise NotFoundError(f"No user: {username}")
        return User.from_row(as_dict(result))

    async def remove(self, username: str) -> None:
        """Delete a user with their favorites and personal recipes.

        Owned rows are deleted here rather than left to ON DELETE CASCADE,
        which SQLite ignores unless foreign keys are switched on.
        """
        async with self.db.transaction():
            result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
                "DELETE FROM users WHERE username = :p1 RETURNING username",
                values=bind([username]),
            )
            if result is None:
                raise NotFoundError(f"No user: {username}")
            for kind in RecipeKind:
                for table in (kind.favorites_table, kind.personal_table):
                    await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                        f"DELETE FROM {table} WHERE username = :p1",
                        values=bind([username]),
                    )

    # Favorites

    async def mark_favorite(self, kind: RecipeKind, username: str, id: int) -> None:
        """Favorite a meal or drink. Favoriting twice is harmless."""
        await self._ensure_recipe(kind, id)
        await self._ensure_user(username)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            f"INSERT INTO {kind.favorites_table} (username, {kind.favorite_column}) "
            "VALUES (:p1, :p2) "
            f"ON CONFLICT (username, {kind.favorite_column}) DO NOTHING",
            values=bind([username, id]),
        )

    async def unmark_favorite(self, kind: RecipeKind, username: str, id: int) -> None:
        """Unfavorite a meal or drink. Unfavoriting a non-favorite is harmless."""
        await self._ensure_recipe(kind, id)
        await self._ensure_user(username)
        await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
            f"DELETE FROM {kind.favorites_table} "
            f"WHERE username = :p1 AND {kind.favorite_column} = :p2",
            values=bind([username, id]),
        )

    mark_fav_meal = functools.partialmethod(mark_favorite, RecipeKind.meals)
    mark_fav_drink = functools.partialmethod(mark_favorite, RecipeKind.drinks)
    unmark_fav_meal = functools.partialmethod(unmark_favorite, RecipeKind.meals)
    unmark_fav_drink = functools.partialmethod(unmark_favorite, RecipeKind.drinks)

    # Personal recipes

    async def get_personal_recipes(self, kind: RecipeKind, username: str) -> list[Recipe]:
        return await PersonalRecipesRepository(self.db, kind).find_all(username)

    async def create_personal_recipe(
        self,
        kind: RecipeKind,
        username: str,
        fields: Mapping[str, Any],
    ) -> Recipe:
        await self._ensure_user(username)
        return await PersonalRecipesRepository(self.db, kind).create(username, fields)

    async def get_personal_recipe(
        self,
        kind: RecipeKind,
        username: str,
        id: int,
    ) -> Recipe:
        return await PersonalRecipesRepository(self.db, kind).get(id, username)

    async def update_personal_recipe(
        self,
        kind: RecipeKind,
        username: str,
        id: int,
        fields: Mapping[str, Any],
    ) -> Recipe:
        return await PersonalRecipesRepository(self.db, kind).update(
            id, username, fields
        )

    async def remove_personal_recipe(
        self,
        kind: RecipeKind,
        username: str,
        id: int,
    ) -> None:
        await PersonalRecipesRepository(self.db, kind).remove(id, username)

    async def _favorite_ids(self, kind: RecipeKind, username: str) -> list[int]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT {kind.favorite_column} FROM {kind.favorites_table} "
            f"WHERE username = :p1 ORDER BY {kind.favorite_column}",
            values=bind([username]),
        )
        return [as_dict(r)[kind.favorite_column] for r in result]

    async def _ensure_recipe(self, kind: RecipeKind, id: int) -> None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            f"SELECT id FROM {kind.table} WHERE id = :p1",
            values=bind([id]),
        )
        if result is None:
            raise NotFoundError(f"No {kind.label}: {id}")

    async def _ensure_user(self, username: str) -> None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            "SELECT username FROM users WHERE username = :p1",
            values=bind([username]),
        )
        if result is None:
            raise NotFoundError(f"No username: {username}")
