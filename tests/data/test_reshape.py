from __future__ import annotations

import polars as pl
import pytest

from gapviz.core.errors import (
    ColumnNotFoundError,
    DuplicateKeyError,
    ReshapeColumnError,
    ReshapeError,
)
from gapviz.data.reshape import pivot_longer, pivot_wider


@pytest.fixture()
def wide() -> pl.DataFrame:
    return pl.DataFrame(
        {
            "country": ["Chile", "Rwanda", "Syria"],
            "1997": [14.599929, 7.212583, 15.081016],
            "2002": [15.497046, 7.852401, 17.155814],
            "2007": [16.284741, 8.860588, 19.314747],
        }
    )


def _long(wide: pl.DataFrame) -> pl.DataFrame:
    return pivot_longer(
        wide, id_cols="country", names_to="year", values_to="pop", names_dtype=pl.Int64
    )


def test_longer_one_row_per_pair(wide: pl.DataFrame) -> None:
    long = _long(wide)
    assert long.columns == ["country", "year", "pop"]
    assert long.height == 9
    assert long.schema["year"] == pl.Int64
    chile_2002 = long.filter((pl.col("country") == "Chile") & (pl.col("year") == 2002))
    assert chile_2002.get_column("pop").to_list() == [15.497046]


def test_round_trip_wide_long_wide(wide: pl.DataFrame) -> None:
    back = pivot_wider(_long(wide), id_cols="country", names_from="year", values_from="pop")
    assert back.columns == wide.columns
    assert back.sort("country").equals(wide.sort("country"))


def test_round_trip_long_wide_long(wide: pl.DataFrame) -> None:
    long = _long(wide)
    again = _long(pivot_wider(long, id_cols="country", names_from="year", values_from="pop"))
    assert again.sort("country", "year").equals(long.sort("country", "year"))


def test_round_trip_is_order_independent(wide: pl.DataFrame) -> None:
    shuffled = _long(wide).sample(fraction=1.0, shuffle=True, seed=7)
    back = pivot_wider(shuffled, id_cols="country", names_from="year", values_from="pop")
    assert back.columns == wide.columns
    assert back.sort("country").equals(wide.sort("country"))


def test_missing_values_are_absent_not_zero(wide: pl.DataFrame) -> None:
    holes = wide.with_columns(
        pl.when(pl.col("country") == "Rwanda").then(None).otherwise(pl.col("2002")).alias("2002")
    )
    long = _long(holes)
    assert long.height == 8
    assert long.filter(pl.col("pop") == 0).height == 0
    back = pivot_wider(long, id_cols="country", names_from="year", values_from="pop")
    assert back.sort("country").equals(holes.sort("country"))


def test_names_prefix_round_trip(wide: pl.DataFrame) -> None:
    prefixed = wide.rename({c: f"pop_{c}" for c in wide.columns if c != "country"})
    long = pivot_longer(
        prefixed, id_cols="country", names_to="year", names_prefix="pop_", names_dtype=pl.Int64
    )
    assert sorted(set(long.get_column("year"))) == [1997, 2002, 2007]
    back = pivot_wider(
        long, id_cols="country", names_from="year", values_from="value", names_prefix="pop_"
    )
    assert back.sort("country").equals(prefixed.sort("country"))


def test_duplicate_identifier_rows_are_an_error(wide: pl.DataFrame) -> None:
    with pytest.raises(DuplicateKeyError, match="duplicate key rows"):
        pivot_longer(pl.concat([wide, wide.head(1)]), id_cols="country")


def test_duplicate_pairs_are_an_error(wide: pl.DataFrame) -> None:
    long = _long(wide)
    with pytest.raises(DuplicateKeyError):
        pivot_wider(
            pl.concat([long, long.head(1)]), id_cols="country", names_from="year", values_from="pop"
        )


def test_unknown_columns(wide: pl.DataFrame) -> None:
    with pytest.raises(ReshapeColumnError, match="'iso'"):
        pivot_longer(wide, id_cols="iso")
    with pytest.raises(ColumnNotFoundError):
        pivot_wider(_long(wide), id_cols="country", names_from="yr", values_from="pop")


def test_unknown_column_is_a_reshape_error(wide: pl.DataFrame) -> None:
    with pytest.raises(ReshapeError):
        pivot_longer(wide, id_cols="country", value_cols=["1997", "2012"])


def test_bad_header_cast(wide: pl.DataFrame) -> None:
    with pytest.raises(ReshapeError, match="cannot be cast"):
        pivot_longer(wide.rename({"1997": "ninety-seven"}), id_cols="country", names_dtype=pl.Int64)


def test_nothing_to_stack() -> None:
    with pytest.raises(ReshapeError, match="no value columns"):
        pivot_longer(pl.DataFrame({"country": ["Chile"]}), id_cols="country")


def test_null_dimension_rejected(wide: pl.DataFrame) -> None:
    long = _long(wide).with_columns(pl.lit(None, dtype=pl.Int64).alias("year"))
    with pytest.raises(ReshapeError, match="has nulls"):
        pivot_wider(long, id_cols="country", names_from="year", values_from="pop")
