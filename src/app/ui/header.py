"""
Header (global controls) for the gapviz Streamlit viewer.

Renders the top-of-page controls:
- Lesson picker, numbered in tour order.
- Theme selector and figure size.

Notes:
    - Selections persist in st.session_state so a rerun keeps the current lesson.
    - Returns RenderSettings so charts in the viewer and the CLI share one code path.
"""

from __future__ import annotations

from dataclasses import replace

import streamlit as st

from gapviz.io.config import RenderSettings
from gapviz.tour.lessons import LESSONS, Lesson, get_lesson
from gapviz.viz.theme import THEMES


def render_header(
    *,
    default_lesson: str | None,
    default_theme: str | None,
) -> tuple[Lesson, RenderSettings]:
    """Render the header and return the selected lesson and render settings.

    Args:
        default_lesson (str | None): Slug preselected on first render.
        default_theme (str | None): Theme preselected on first render (falls back to the
            configured default).

    Returns:
        tuple[Lesson, RenderSettings]: (selected lesson, settings for drawing it)
    """
    base = RenderSettings.load()

    st.markdown(f"### {base.document_title}")

    slugs = [lesson.slug for lesson in LESSONS]
    if "lesson_slug" not in st.session_state:
        st.session_state["lesson_slug"] = default_lesson if default_lesson in slugs else slugs[0]
    if "theme_choice" not in st.session_state:
        st.session_state["theme_choice"] = default_theme if default_theme in THEMES else base.theme

    c1, c2, c3 = st.columns([0.55, 0.2, 0.25])
    with c1:
        slug = st.selectbox(
            "Lesson",
            options=slugs,
            index=slugs.index(st.session_state["lesson_slug"]),
            format_func=lambda s: f"{slugs.index(s) + 1}. {get_lesson(s).title}",
            key="lesson_selector_header",
        )
        st.session_state["lesson_slug"] = slug
    with c2:
        names = sorted(THEMES)
        theme_choice = st.selectbox(
            "Theme",
            options=names,
            index=names.index(st.session_state["theme_choice"]),
            key="theme_choice_header",
        )
        st.session_state["theme_choice"] = theme_choice
    with c3:
        start = min(max(base.width, 300), 1200)
        width = st.slider("Width (px)", min_value=300, max_value=1200, value=start, step=50)

    settings = replace(base, theme=theme_choice, width=int(width)).validate()
    return get_lesson(slug), settings
