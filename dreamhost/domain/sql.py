"""Helpers for building parameterized SQL.

Placeholders are named ``:p1``, ``:p2`` ... so that the same statement can be
handed to ``databases`` whatever the backend's native paramstyle is.
"""
from typing import Any, Mapping

from dreamhost.domain.errors import BadRequestError


PLACEHOLDER_PREFIX = "p"


def placeholder(idx: int) -> str:
    return f":{PLACEHOLDER_PREFIX}{idx}"


def bind(values: list[Any]) -> dict[str, Any]:
    """Bind parameters for placeholders numbered from one."""
    return {f"{PLACEHOLDER_PREFIX}{i}": v for i, v in enumerate(values, start=1)}


class PartialUpdate:
    def __init__(self, assignments: list[str], values: list[Any]) -> None:
        self.assignments = assignments
        self.values = values

    def __repr__(self) -> str:
        return f"<PartialUpdate(set_cols={self.set_cols!r}, values={self.values!r})>"

    @property
    def set_cols(self) -> str:
        return ", ".join(self.assignments)

    def placeholder(self, offset: int = 1) -> str:
        """Placeholder ``offset`` positions past the last assigned value."""
        return placeholder(len(self.values) + offset)

    def params(self, *trailing: Any) -> dict[str, Any]:
        return bind([*self.values, *trailing])


def sql_for_partial_update(
    data: Mapping[str, Any],
    columns: Mapping[str, str] | None = None,
) -> PartialUpdate:
    """Turn a sparse field mapping into the SET part of an UPDATE.

    `columns` maps external field names onto storage column names, for fields
    where the two differ. Keys are kept in `data`'s iteration order and values
    are passed through untouched.

        >>> u = sql_for_partial_update({"firstName": "Aliya", "age": 32},
        ...                            {"firstName": "first_name"})
        >>> u.set_cols
        'first_name = :p1, age = :p2'
        >>> u.values
        ['Aliya', 32]
    """
    if not data:
        raise BadRequestError("No data")

    columns = {} if columns is None else columns
    assignments = [
        f"{columns.get(key, key)} = {placeholder(idx)}"
        for idx, key in enumerate(data, start=1)
    ]
    return PartialUpdate(assignments, list(data.values()))
