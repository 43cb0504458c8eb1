"""
Wide/long reshaping.

Overview
- pivot_longer(): stack value columns into (name, value) rows; one row per
  (identifier, dimension) pair that has a value.
- pivot_wider(): spread a dimension column into one column per value.

Round-trip law
- pivot_wider(pivot_longer(w, id_cols=ids, names_dtype=d), id_cols=ids, ...) reproduces w
  up to row and column order, provided no value column of w is entirely null.
- pivot_longer(pivot_wider(l, ...), ...) reproduces l up to row order.

Notes
- Missing values never become zeros: nulls in a wide table produce absent long rows, and
  absent long rows produce nulls in the wide table.
- Uniqueness is checked before reshaping; Polars would otherwise aggregate or fail with a
  less specific message.
- Unknown columns raise ReshapeColumnError, a ReshapeError that is also a
  ColumnNotFoundError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import polars as pl

from gapviz.core.errors import DuplicateKeyError, ReshapeColumnError, ReshapeError

logger = logging.getLogger(__name__)

__all__ = ["pivot_longer", "pivot_wider"]


def _as_list(cols: str | Iterable[str]) -> list[str]:
    return [cols] if isinstance(cols, str) else list(cols)


def _require_columns(df: pl.DataFrame, cols: Sequence[str], what: str) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ReshapeColumnError(
            f"{what}: unknown column(s) {missing!r} (available: {df.columns!r})"
        )


def _ensure_unique(df: pl.DataFrame, keys: list[str], what: str) -> None:
    dup = df.select(keys).is_duplicated()
    if dup.any():
        sample = df.select(keys).filter(dup).unique(maintain_order=True).head(3).rows()
        raise DuplicateKeyError(f"{what}: duplicate key rows for {keys!r}, e.g. {sample!r}")


def pivot_longer(
    df: pl.DataFrame,
    *,
    id_cols: str | Iterable[str],
    value_cols: Iterable[str] | None = None,
    names_to: str = "name",
    values_to: str = "value",
    names_prefix: str = "",
    names_dtype: pl.DataType | type[pl.DataType] | None = None,
) -> pl.DataFrame:
    """Convert a wide table to long format.

    Args:
        df (pl.DataFrame): Wide table, one row per identifier.
        id_cols (str | Iterable[str]): Identifier column(s) kept on every row.
        value_cols (Iterable[str] | None): Columns to stack; defaults to every non-id column.
        names_to (str): Name of the new dimension column (former column headers).
        values_to (str): Name of the new value column.
        names_prefix (str): Prefix stripped from headers before they become dimension values.
        names_dtype: Optional dtype for the dimension column (e.g. pl.Int64 for year headers).

    Returns:
        pl.DataFrame: Columns [*id_cols, names_to, values_to]; rows whose value is null
        are dropped.

    Raises:
        ReshapeColumnError: If an id or value column does not exist.
        DuplicateKeyError: If identifier rows are not unique.
        ReshapeError: If there is nothing to stack, output names collide, or headers cannot
            be cast to names_dtype.

    Examples:
        >>> wide = pl.DataFrame({"country": ["Chile"], "1997": [14.6], "2002": [15.5]})
        >>> pivot_longer(wide, id_cols="country", names_to="year", values_to="pop",
        ...              names_dtype=pl.Int64).shape
        (2, 3)
    """
    ids = _as_list(id_cols)
    _require_columns(df, ids, "pivot_longer")
    values = [c for c in df.columns if c not in ids] if value_cols is None else list(value_cols)
    _require_columns(df, values, "pivot_longer")
    if not values:
        raise ReshapeError("pivot_longer: no value columns to stack")
    overlap = set(values) & set(ids)
    if overlap:
        raise ReshapeError(f"pivot_longer: columns {sorted(overlap)!r} are both id and value")
    if names_to == values_to or {names_to, values_to} & set(ids):
        raise ReshapeError(
            f"pivot_longer: output names {names_to!r}/{values_to!r} must be distinct "
            f"and must not shadow id columns {ids!r}"
        )
    _ensure_unique(df, ids, "pivot_longer")

    long = df.unpivot(on=values, index=ids, variable_name=names_to, value_name=values_to)
    long = long.filter(pl.col(values_to).is_not_null())
    if names_prefix:
        long = long.with_columns(pl.col(names_to).str.strip_prefix(names_prefix))
    if names_dtype is not None:
        try:
            long = long.with_columns(pl.col(names_to).cast(names_dtype, strict=True))
        except pl.exceptions.PolarsError as exc:
            raise ReshapeError(
                f"pivot_longer: headers of {values!r} cannot be cast to {names_dtype}: {exc}"
            ) from exc
    logger.debug("pivot_longer: %s -> %s", df.shape, long.shape)
    return long


def pivot_wider(
    df: pl.DataFrame,
    *,
    id_cols: str | Iterable[str],
    names_from: str,
    values_from: str,
    names_prefix: str = "",
) -> pl.DataFrame:
    """Convert a long table to wide format.

    Args:
        df (pl.DataFrame): Long table, one row per (identifier, dimension) pair.
        id_cols (str | Iterable[str]): Identifier column(s); one output row per identifier.
        names_from (str): Dimension column whose values become column names.
        values_from (str): Column holding the values to spread.
        names_prefix (str): Prefix added to every new column name (e.g. "pop_").

    Returns:
        pl.DataFrame: Columns [*id_cols, *dimension values in ascending order]. Pairs
        absent from the input are null.

    Raises:
        ReshapeColumnError: If a referenced column does not exist.
        DuplicateKeyError: If an (identifier, dimension) pair occurs more than once.
        ReshapeError: If the dimension has nulls or a new column name collides with an id.

    Examples:
        >>> long = pl.DataFrame({"country": ["Chile", "Chile"], "year": [1997, 2002],
        ...                      "pop": [14.6, 15.5]})
        >>> pivot_wider(long, id_cols="country", names_from="year", values_from="pop").columns
        ['country', '1997', '2002']
    """
    ids = _as_list(id_cols)
    if not ids:
        raise ReshapeError("pivot_wider: at least one id column is required")
    _require_columns(df, [*ids, names_from, values_from], "pivot_wider")
    if df.get_column(names_from).null_count():
        raise ReshapeError(f"pivot_wider: {names_from!r} has nulls; every value needs a column")
    _ensure_unique(df, [*ids, names_from], "pivot_wider")

    ordered = df.sort(names_from, maintain_order=True)
    dims = [str(v) for v in ordered.get_column(names_from).unique(maintain_order=True).to_list()]
    clash = {f"{names_prefix}{d}" for d in dims} & set(ids)
    if clash:
        raise ReshapeError(f"pivot_wider: new columns {sorted(clash)!r} collide with id columns")

    wide = ordered.pivot(
        on=names_from,
        index=ids,
        values=values_from,
        aggregate_function=None,
        maintain_order=True,
    )
    if names_prefix:
        wide = wide.rename({d: f"{names_prefix}{d}" for d in dims})
    logger.debug("pivot_wider: %s -> %s", df.shape, wide.shape)
    return wide
