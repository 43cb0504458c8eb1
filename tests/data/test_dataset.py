from __future__ import annotations

import polars as pl
import pytest

from gapviz.core.constants import FIRST_YEAR, LAST_YEAR, OBSERVATION_COLUMNS, YEAR_STEP
from gapviz.core.grammar import Continent
from gapviz.data.dataset import filter_observations, load_gapminder, observations


def test_table_shape_and_columns(gapminder: pl.DataFrame) -> None:
    assert gapminder.columns == list(OBSERVATION_COLUMNS)
    assert gapminder.height == 1704
    assert gapminder.get_column("country").n_unique() == 142
    years = sorted(gapminder.get_column("year").unique().to_list())
    assert years == list(range(FIRST_YEAR, LAST_YEAR + 1, YEAR_STEP))


def test_table_is_cached() -> None:
    assert load_gapminder() is load_gapminder()


def test_value_ranges_hold_for_every_row(gapminder: pl.DataFrame) -> None:
    assert gapminder.get_column("life_exp").min() >= 0
    assert gapminder.get_column("gdp_percap").min() >= 0
    assert gapminder.get_column("pop").min() > 0
    assert gapminder.schema["pop"] == pl.Int64
    assert set(gapminder.get_column("continent").unique()) == {c.value for c in Continent}


def test_sorted_by_country_then_year(gapminder: pl.DataFrame) -> None:
    assert gapminder.equals(gapminder.sort("country", "year"))


def test_known_values(gapminder: pl.DataFrame) -> None:
    row = gapminder.filter((pl.col("country") == "Afghanistan") & (pl.col("year") == 1952)).row(
        0, named=True
    )
    assert row["continent"] == "Asia"
    assert row["life_exp"] == pytest.approx(28.801)
    assert row["pop"] == 8425333


def test_observations_are_typed_records(small_frame: pl.DataFrame) -> None:
    obs = observations(small_frame)
    assert len(obs) == small_frame.height
    assert obs[0].country == "Chile"
    assert isinstance(obs[0].pop, int)


def test_filter_by_continent_is_subset(gapminder: pl.DataFrame) -> None:
    americas = filter_observations(gapminder, continent="Americas")
    assert 0 < americas.height <= gapminder.height
    assert americas.get_column("continent").unique().to_list() == ["Americas"]
    assert americas.height == 300


def test_filter_accepts_enum_and_any_case(gapminder: pl.DataFrame) -> None:
    a = filter_observations(gapminder, continent=Continent.EUROPE)
    b = filter_observations(gapminder, continent="europe")
    assert a.equals(b)


def test_filter_years_are_inclusive(small_frame: pl.DataFrame) -> None:
    out = filter_observations(small_frame, countries=["Chile", "Syria"], year_min=2002, year_max=2007)
    assert out.height == 4
    assert set(out.get_column("year")) == {2002, 2007}


def test_filter_without_predicates_returns_input(small_frame: pl.DataFrame) -> None:
    assert filter_observations(small_frame) is small_frame


def test_filter_unknown_continent_raises(small_frame: pl.DataFrame) -> None:
    with pytest.raises(ValueError, match="unknown continent"):
        filter_observations(small_frame, continent="Atlantis")
