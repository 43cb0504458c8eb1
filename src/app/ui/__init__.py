"""
gapviz viewer UI package.

Modules:
    - app: Streamlit application orchestrator (streamlit_app).
    - header: Global header (lesson picker, theme, figure width).

Usage:
    from app.ui import streamlit_app
    streamlit_app(default_lesson="log-scale", default_theme="bw")
"""

from __future__ import annotations

from .app import streamlit_app
from .header import render_header

__all__ = [
    "streamlit_app",
    "render_header",
]
