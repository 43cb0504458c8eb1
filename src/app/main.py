"""
gapviz viewer entrypoint.

This module provides the CLI entrypoint to launch the Streamlit viewer. It defers
all UI composition to the app.ui package and exists solely to start Streamlit
programmatically or render directly when already running under Streamlit.

Usage:
    - Python execution (hands process to Streamlit):
        gapviz-app --lesson log-scale --theme bw

    - Streamlit direct:
        streamlit run src/app/main.py -- --lesson log-scale --theme bw
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

from app.ui import streamlit_app


def _parser(add_help: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="gapviz tour viewer", add_help=add_help)
    parser.add_argument("--lesson", default=None, help="Lesson slug to open first.")
    parser.add_argument("--theme", default=None, help="Theme to select first.")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Console entrypoint that launches Streamlit with the tour viewer.

    If already executing within a Streamlit server (environment variable
    STREAMLIT_SERVER_PORT is set), this function renders the app directly.
    Otherwise, it execs "python -m streamlit run <this_module>" to leverage
    Streamlit's reloader and argument parsing, passing through any supported
    options after "--".

    Args:
        argv (list[str] | None): Optional list of CLI arguments. If None,
            sys.argv[1:] is used.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    ns = _parser().parse_args(args)

    if os.environ.get("STREAMLIT_SERVER_PORT"):
        streamlit_app(default_lesson=ns.lesson, default_theme=ns.theme)
        return

    app_path = Path(__file__).resolve()
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path)]

    passthrough: list[str] = []
    if ns.lesson:
        passthrough += ["--lesson", ns.lesson]
    if ns.theme:
        passthrough += ["--theme", ns.theme]
    if passthrough:
        cmd += ["--"] + passthrough

    try:
        os.execv(sys.executable, cmd)
    except OSError:
        subprocess.run(cmd, check=False)


if __name__ == "__main__":
    # `streamlit run src/app/main.py -- --lesson ...` lands here
    ns, _ = _parser(add_help=False).parse_known_args(sys.argv[1:])
    streamlit_app(default_lesson=ns.lesson, default_theme=ns.theme)
