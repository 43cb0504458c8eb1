"""
Schema validation for the gapminder table.

Purpose
- Validate Polars DataFrames against the canonical column descriptor in
  gapviz.core.constants.OBSERVATION_COLUMNS.
- Apply pragmatic checks with safe casting for scalar dtypes, then vectorized value checks
  that mirror gapviz.core.schema.Observation.

Checks performed
- Required columns present.
- When strict=True: no columns outside the descriptor.
- Dtype compatibility: scalar types ("i64","f64","str") are cast when they differ.
- No nulls; life_exp >= 0; gdp_percap >= 0; pop > 0; continent is a known label;
  (country, year) pairs are unique.
"""

from __future__ import annotations

from collections.abc import Iterable

import polars as pl

from gapviz.core.constants import (
    CONTINENT,
    COUNTRY,
    GDP_PERCAP,
    LIFE_EXP,
    OBSERVATION_COLUMNS,
    POP,
    YEAR,
)
from gapviz.core.errors import SchemaError
from gapviz.core.grammar import Continent

__all__ = ["validate_observations"]

_DTYPE_MAP: dict[str, object] = {
    "i64": pl.Int64,
    "f64": pl.Float64,
    "str": pl.String,
}


def _safe_cast(df: pl.DataFrame, col: str, target: object) -> pl.DataFrame:
    try:
        return df.with_columns(pl.col(col).cast(target, strict=True))  # type: ignore[arg-type]
    except pl.exceptions.PolarsError as exc:
        raise SchemaError(f"failed to cast column {col!r} to {target}: {exc}") from exc


def _ensure_columns_present(df: pl.DataFrame, needed: Iterable[str]) -> None:
    missing = [c for c in needed if c not in df.columns]
    if missing:
        raise SchemaError(f"missing required columns: {missing!r}")


def _ensure_no_extra_columns(df: pl.DataFrame, allowed: set[str]) -> None:
    extras = [c for c in df.columns if c not in allowed]
    if extras:
        raise SchemaError(f"unexpected columns present: {extras!r} (allowed={sorted(allowed)!r})")


def _count(df: pl.DataFrame, predicate: pl.Expr) -> int:
    return int(df.select(predicate.sum()).item())


def validate_observations(df: pl.DataFrame, *, strict: bool = True) -> pl.DataFrame:
    """
    Validate a frame of observations and return it in canonical column order and dtypes.

    Args:
        df (pl.DataFrame): Frame to validate.
        strict (bool): Reject columns outside the descriptor when True; keep them
            (after the canonical columns) when False.

    Returns:
        pl.DataFrame: Possibly cast frame with the canonical columns first.

    Raises:
        SchemaError: If columns are missing or unexpected, a cast fails, or any row
            violates the Observation value rules.
    """
    expected = OBSERVATION_COLUMNS
    _ensure_columns_present(df, expected)
    if strict:
        _ensure_no_extra_columns(df, set(expected))

    for col, dtype_name in expected.items():
        target = _DTYPE_MAP[dtype_name]
        if df.schema[col] != target:
            df = _safe_cast(df, col, target)

    nulls = {c: n for c, n in zip(df.columns, df.null_count().row(0)) if c in expected and n}
    if nulls:
        raise SchemaError(f"null values in columns: {nulls!r}")

    rules: list[tuple[str, pl.Expr]] = [
        (f"{LIFE_EXP} < 0", pl.col(LIFE_EXP) < 0),
        (f"{GDP_PERCAP} < 0", pl.col(GDP_PERCAP) < 0),
        (f"{POP} <= 0", pl.col(POP) <= 0),
        (
            f"{CONTINENT} not in {[c.value for c in Continent]}",
            ~pl.col(CONTINENT).is_in([c.value for c in Continent]),
        ),
        (f"duplicate ({COUNTRY}, {YEAR})", pl.struct(COUNTRY, YEAR).is_duplicated()),
    ]
    for label, predicate in rules:
        bad = _count(df, predicate)
        if bad:
            raise SchemaError(f"{bad} row(s) violate rule: {label}")

    extras = [c for c in df.columns if c not in expected]
    return df.select([*expected, *extras])
