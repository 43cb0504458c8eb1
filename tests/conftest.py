from __future__ import annotations

import polars as pl
import pytest

from gapviz.data.dataset import load_gapminder


@pytest.fixture()
def small_frame() -> pl.DataFrame:
    """Three countries over three years, in canonical column order."""
    return pl.DataFrame(
        {
            "country": ["Chile"] * 3 + ["Rwanda"] * 3 + ["Syria"] * 3,
            "continent": ["Americas"] * 3 + ["Africa"] * 3 + ["Asia"] * 3,
            "year": [1997, 2002, 2007] * 3,
            "life_exp": [75.816, 77.86, 78.553, 36.087, 43.413, 46.242, 71.527, 73.053, 74.143],
            "pop": [
                14599929,
                15497046,
                16284741,
                7212583,
                7852401,
                8860588,
                15081016,
                17155814,
                19314747,
            ],
            "gdp_percap": [
                10118.05318,
                10778.78385,
                13171.63885,
                589.9445051,
                785.6537648,
                863.0884639,
                4014.238972,
                4090.925331,
                4184.548089,
            ],
        }
    )


@pytest.fixture(scope="session")
def gapminder() -> pl.DataFrame:
    return load_gapminder()
