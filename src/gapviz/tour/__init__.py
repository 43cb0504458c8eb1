"""
gapviz.tour - The narrated sequence of exercises and the document built from it.

## Public API
- LESSONS, Lesson, get_lesson, run_lesson, run_tour - the exercises.
- render_document, write_document - the whole tour as one HTML page.

## Import DAG discipline
- Sits on top of gapviz.data, gapviz.viz and gapviz.io; only the CLI and the viewer import it.
"""

from __future__ import annotations

from .document import render_document, write_document
from .lessons import LESSONS, Lesson, LessonResult, get_lesson, run_lesson, run_tour

__all__ = [
    "LESSONS",
    "Lesson",
    "LessonResult",
    "get_lesson",
    "run_lesson",
    "run_tour",
    "render_document",
    "write_document",
]
