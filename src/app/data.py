from __future__ import annotations

import polars as pl
import streamlit as st

from gapviz.data.dataset import load_gapminder
from gapviz.tour.lessons import LessonResult, run_lesson

__all__ = ["load_table", "lesson_result"]


@st.cache_data(show_spinner=False)
def load_table() -> pl.DataFrame:
    """Full gapminder table, cached across reruns and sessions."""
    return load_gapminder()


def lesson_result(slug: str) -> LessonResult:
    """Run one lesson against the cached table.

    Specs hold Polars expressions and builder callables, which Streamlit cannot hash
    for st.cache_data, so only the table is cached; building a spec is cheap.
    """
    return run_lesson(slug, load_table())
