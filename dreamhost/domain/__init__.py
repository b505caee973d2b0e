"""Describes the DreamHost domain. Centres around the recipe repositories.

Where's the difficulty?

- Every entity is updated the same way: some arbitrary subset of its columns.
  That lives once, in `sql.sql_for_partial_update`, rather than as hand-built
  SQL per entity.
- Every mutating operation checks that what it touches exists and fails with
  a typed error before it writes anything.
- Meals and drinks are the same thing with different columns. `RecipeKind`
  carries the difference so each operation is written once.

Uniqueness and foreign keys are also enforced by the schema. The checks here
exist to give a friendly error in the common case.
"""
