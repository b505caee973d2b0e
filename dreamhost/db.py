import logging
from typing import Any

from databases import Database
from databases.interfaces import Record
import sqlalchemy as sa
from sqlalchemy.engine import Dialect
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable

from dreamhost import config


CONFIG = config.Config()


logger = logging.getLogger(__name__)


# Tables are declared once here and rendered to DDL for whichever backend the
# url points at. Queries themselves are plain SQL in the repositories.
metadata = sa.MetaData()


users = sa.Table(
    "users",
    metadata,
    sa.Column("username", sa.String(25), primary_key=True),
    sa.Column("password", sa.Text, nullable=False),
    sa.Column("first_name", sa.Text, nullable=False),
    sa.Column("last_name", sa.Text, nullable=False),
    sa.Column("email", sa.Text, nullable=False),
    sa.CheckConstraint("email LIKE '_%@%'", name="users_email_check"),
)


meals = sa.Table(
    "meals",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.Text, nullable=False, unique=True),
    sa.Column("category", sa.Text, nullable=False),
    sa.Column("area", sa.Text, nullable=False),
    sa.Column("instructions", sa.Text, nullable=False),
    sa.Column("thumbnail", sa.Text),
    sa.Column("ingredients", sa.Text, nullable=False),
)


drinks = sa.Table(
    "drinks",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.Text, nullable=False, unique=True),
    sa.Column("category", sa.Text, nullable=False),
    sa.Column("type", sa.Text, nullable=False),
    sa.Column("glass", sa.Text),
    sa.Column("instructions", sa.Text, nullable=False),
    sa.Column("thumbnail", sa.Text),
    sa.Column("ingredients", sa.Text, nullable=False),
)


def _owner() -> sa.Column[Any]:
    return sa.Column(
        "username",
        sa.String(25),
        sa.ForeignKey("users.username", ondelete="CASCADE"),
        nullable=False,
    )


personal_meals = sa.Table(
    "personal_meals",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.Text, nullable=False),
    sa.Column("category", sa.Text, nullable=False),
    sa.Column("area", sa.Text, nullable=False),
    sa.Column("instructions", sa.Text, nullable=False),
    sa.Column("thumbnail", sa.Text),
    sa.Column("ingredients", sa.Text, nullable=False),
    _owner(),
)


personal_drinks = sa.Table(
    "personal_drinks",
    metadata,
    sa.Column("id", sa.Integer, primary_key=True),
    sa.Column("name", sa.Text, nullable=False),
    sa.Column("category", sa.Text, nullable=False),
    sa.Column("type", sa.Text, nullable=False),
    sa.Column("glass", sa.Text),
    sa.Column("instructions", sa.Text, nullable=False),
    sa.Column("thumbnail", sa.Text),
    sa.Column("ingredients", sa.Text, nullable=False),
    _owner(),
)


favorite_meals = sa.Table(
    "favorite_meals",
    metadata,
    sa.Column(
        "username",
        sa.String(25),
        sa.ForeignKey("users.username", ondelete="CASCADE"),
        primary_key=True,
    ),
    sa.Column(
        "meal_id",
        sa.Integer,
        sa.ForeignKey("meals.id", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    ),
)


favorite_drinks = sa.Table(
    "favorite_drinks",
    metadata,
    sa.Column(
        "username",
        sa.String(25),
        sa.ForeignKey("users.username", ondelete="CASCADE"),
        primary_key=True,
    ),
    sa.Column(
        "drink_id",
        sa.Integer,
        sa.ForeignKey("drinks.id", ondelete="CASCADE"),
        primary_key=True,
        autoincrement=False,
    ),
)


DIALECTS: dict[str, Dialect] = {
    "postgresql": postgresql.dialect(),
    "sqlite": sqlite.dialect(),
}


db = Database(CONFIG.db_url)


async def create_db(database: Database) -> None:
    """Create any missing tables."""
    dialect = DIALECTS[database.url.dialect]
    for table in metadata.sorted_tables:
        ddl = CreateTable(table, if_not_exists=True).compile(dialect=dialect)
        await database.execute(  # pyright: ignore[reportUnknownMemberType]
            query=str(ddl)
        )
    logger.info("Tables ready on %s", database.url.dialect)


def as_dict(record: Record) -> dict[str, Any]:
    return dict(record._mapping)  # pyright: ignore[reportPrivateUsage]
