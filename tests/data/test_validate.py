from __future__ import annotations

import polars as pl
import pytest

from gapviz.core.errors import SchemaError
from gapviz.data.validate import validate_observations


def test_valid_frame_passes_and_keeps_order(small_frame: pl.DataFrame) -> None:
    out = validate_observations(small_frame.select(small_frame.columns[::-1]))
    assert out.columns == small_frame.columns


def test_safe_cast_widens_integer_columns(small_frame: pl.DataFrame) -> None:
    out = validate_observations(small_frame.with_columns(pl.col("year").cast(pl.Int32)))
    assert out.schema["year"] == pl.Int64


def test_missing_column(small_frame: pl.DataFrame) -> None:
    with pytest.raises(SchemaError, match="missing required columns"):
        validate_observations(small_frame.drop("pop"))


def test_extra_column_strict_and_lenient(small_frame: pl.DataFrame) -> None:
    extra = small_frame.with_columns(pl.lit("X").alias("iso_alpha"))
    with pytest.raises(SchemaError, match="unexpected columns"):
        validate_observations(extra)
    assert validate_observations(extra, strict=False).columns[-1] == "iso_alpha"


def test_uncastable_column(small_frame: pl.DataFrame) -> None:
    bad = small_frame.with_columns(pl.lit("n/a").alias("life_exp"))
    with pytest.raises(SchemaError, match="failed to cast column 'life_exp'"):
        validate_observations(bad)


@pytest.mark.parametrize(
    "expr, rule",
    [
        (pl.lit(-1.0).alias("life_exp"), "life_exp < 0"),
        (pl.lit(-1.0).alias("gdp_percap"), "gdp_percap < 0"),
        (pl.lit(0).alias("pop"), "pop <= 0"),
        (pl.lit("Atlantis").alias("continent"), "continent not in"),
    ],
)
def test_value_rules(small_frame: pl.DataFrame, expr, rule) -> None:
    with pytest.raises(SchemaError, match=rule):
        validate_observations(small_frame.with_columns(expr))


def test_nulls_rejected(small_frame: pl.DataFrame) -> None:
    bad = small_frame.with_columns(
        pl.when(pl.col("year") == 2002).then(None).otherwise(pl.col("life_exp")).alias("life_exp")
    )
    with pytest.raises(SchemaError, match="null values"):
        validate_observations(bad)


def test_duplicate_country_year(small_frame: pl.DataFrame) -> None:
    with pytest.raises(SchemaError, match="duplicate"):
        validate_observations(pl.concat([small_frame, small_frame.head(1)]))
