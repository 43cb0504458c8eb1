"""
Top-level Streamlit app package.

Hosts the interactive tour viewer, decoupled from the gapviz.* library modules:
lessons and rendering live in gapviz; the Streamlit shell lives here.

CLI entrypoint (configured in pyproject.toml):
    gapviz-app = app.main:main
"""

from __future__ import annotations
