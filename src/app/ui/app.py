"""
Streamlit application orchestrator for the gapviz tour viewer.

Responsibilities:
    - Configure the Streamlit page.
    - Render the global header (lesson picker, theme, width).
    - Show the selected lesson: prose, the code that builds it, and its chart or table.
    - Offer previous/next navigation through the tour.

Notes:
    - Charts are produced by gapviz.viz.render.build_chart, the same path the CLI uses.
    - Authoring errors in a lesson are shown in the page instead of stopping the app.
"""

from __future__ import annotations

import inspect

import polars as pl
import streamlit as st

from app.data import lesson_result
from gapviz.core.errors import SpecError
from gapviz.tour.lessons import LESSONS
from gapviz.viz.render import build_chart

from .header import render_header


def _step(offset: int) -> None:
    slugs = [lesson.slug for lesson in LESSONS]
    idx = slugs.index(st.session_state["lesson_slug"])
    st.session_state["lesson_slug"] = slugs[(idx + offset) % len(slugs)]
    st.session_state.pop("lesson_selector_header", None)


def streamlit_app(default_lesson: str | None = None, default_theme: str | None = None) -> None:
    """Render the gapviz tour viewer.

    Args:
        default_lesson (str | None): Lesson slug to open first.
        default_theme (str | None): Theme to select first.

    Returns:
        None
    """
    st.set_page_config(page_title="gapviz", layout="wide")

    lesson, settings = render_header(default_lesson=default_lesson, default_theme=default_theme)

    st.subheader(lesson.title)
    st.caption(lesson.section)
    st.markdown(lesson.prose)
    with st.expander("Code", expanded=False):
        st.code(inspect.getsource(lesson.build), language="python")

    result = lesson_result(lesson.slug)
    if isinstance(result.output, pl.DataFrame):
        st.dataframe(result.output, hide_index=True)
    else:
        try:
            chart = build_chart(result.output, settings, interactive=True)
        except SpecError as e:
            st.error(str(e))
        else:
            # theme=None keeps the chart's own configuration instead of Streamlit's theme
            st.altair_chart(chart, theme=None)

    c1, c2, _ = st.columns([0.15, 0.15, 0.7])
    with c1:
        st.button("Previous", on_click=_step, args=(-1,))
    with c2:
        st.button("Next", on_click=_step, args=(1,))
