"""
Render the whole tour as one self-contained HTML document.

Overview
- render_document(): run (or take) lesson results and produce an HTML page with a
  heading per section, the lesson prose rendered from markdown, the code that built the
  output, and the output itself (a vega-embed chart or an HTML table).
- write_document(): render and write the page, creating parent directories.

Notes
- Charts are embedded as Vega-Lite JSON with inline data; the page loads vega, vega-lite
  and vega-embed from a CDN at the versions Altair targets.
- Tables longer than `max_rows` are truncated with a note.
"""

from __future__ import annotations

import html
import inspect
import json
import logging
import textwrap
from collections.abc import Sequence
from pathlib import Path

import altair as alt
import markdown
import polars as pl

from gapviz.io.config import RenderSettings
from gapviz.io.errors import IoSaveError
from gapviz.viz.render import build_chart

from .lessons import LessonResult, run_tour

logger = logging.getLogger(__name__)

__all__ = ["render_document", "write_document", "table_html"]

_CDN = "https://cdn.jsdelivr.net/npm"

_STYLE = """
body { font-family: -apple-system, "Segoe UI", Helvetica, Arial, sans-serif;
       max-width: 980px; margin: 2rem auto; padding: 0 1rem; color: #222; line-height: 1.5; }
h1 { border-bottom: 2px solid #ddd; padding-bottom: .3rem; }
h2 { margin-top: 2.5rem; border-bottom: 1px solid #eee; }
pre { background: #f6f8fa; padding: .75rem; overflow-x: auto; font-size: 0.85rem; }
table.frame { border-collapse: collapse; font-size: 0.9rem; }
table.frame th, table.frame td { border: 1px solid #ddd; padding: .25rem .6rem; text-align: right; }
table.frame th { background: #f0f0f0; }
.note { color: #666; font-size: 0.85rem; }
"""


def _format_cell(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:,.3f}"
    return str(value)


def table_html(df: pl.DataFrame, *, max_rows: int = 20) -> str:
    """Render a DataFrame as an escaped HTML table (first `max_rows` rows)."""
    head = "".join(f"<th>{html.escape(c)}</th>" for c in df.columns)
    body = []
    for row in df.head(max_rows).iter_rows():
        cells = "".join(f"<td>{html.escape(_format_cell(v))}</td>" for v in row)
        body.append(f"<tr>{cells}</tr>")
    out = f'<table class="frame"><thead><tr>{head}</tr></thead><tbody>{"".join(body)}</tbody></table>'
    if df.height > max_rows:
        out += f'<p class="note">Showing {max_rows} of {df.height} rows.</p>'
    return out


def _script_json(obj: object) -> str:
    """JSON safe to inline in a <script> block (no "</" can close it early)."""
    return json.dumps(obj).replace("</", "<\\/")


def _source(result: LessonResult) -> str | None:
    try:
        return textwrap.dedent(inspect.getsource(result.lesson.build))
    except (OSError, TypeError):
        logger.debug("no source available for lesson %s", result.lesson.slug)
        return None


def _lesson_html(result: LessonResult, index: int, settings: RenderSettings, max_rows: int) -> str:
    lesson = result.lesson
    parts = [
        f'<section id="{html.escape(lesson.slug)}">',
        f"<h3>{index}. {html.escape(lesson.title)}</h3>",
        markdown.markdown(lesson.prose),
    ]
    code = _source(result)
    if code:
        parts.append(f"<pre><code>{html.escape(code)}</code></pre>")
    if isinstance(result.output, pl.DataFrame):
        parts.append(table_html(result.output, max_rows=max_rows))
    else:
        spec = _script_json(build_chart(result.output, settings).to_dict())
        target = f"vis-{index}"
        parts.append(f'<div id="{target}"></div>')
        parts.append(
            f'<script>vegaEmbed("#{target}", {spec}, {{"actions": false}})'
            f".catch(console.error);</script>"
        )
    parts.append("</section>")
    return "\n".join(parts)


def render_document(
    results: Sequence[LessonResult] | None = None,
    settings: RenderSettings | None = None,
    *,
    max_rows: int = 20,
) -> str:
    """Render lesson results as one HTML page.

    Args:
        results (Sequence[LessonResult] | None): Lesson outputs; defaults to run_tour().
        settings (RenderSettings | None): Chart size, theme, and document title.
        max_rows (int): Row limit for table outputs.

    Returns:
        str: Complete HTML document.

    Raises:
        gapviz.core.errors.SpecError: If a lesson's chart fails validation.
    """
    settings = settings or RenderSettings()
    results = run_tour() if results is None else results
    title = html.escape(settings.document_title)

    body: list[str] = [f"<h1>{title}</h1>"]
    section: str | None = None
    for index, result in enumerate(results, start=1):
        if result.lesson.section != section:
            section = result.lesson.section
            body.append(f"<h2>{html.escape(section)}</h2>")
        body.append(_lesson_html(result, index, settings, max_rows))

    scripts = "\n".join(
        f'<script src="{_CDN}/{name}@{version}"></script>'
        for name, version in (
            ("vega", alt.VEGA_VERSION),
            ("vega-lite", alt.VEGALITE_VERSION),
            ("vega-embed", alt.VEGAEMBED_VERSION),
        )
    )
    logger.debug("rendered document with %d lesson(s)", len(results))
    return (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8">\n'
        f"<title>{title}</title>\n{scripts}\n<style>{_STYLE}</style>\n</head>\n"
        f"<body>\n{chr(10).join(body)}\n</body>\n</html>\n"
    )


def write_document(
    path: str | Path,
    results: Sequence[LessonResult] | None = None,
    settings: RenderSettings | None = None,
) -> Path:
    """Render the document and write it to `path`.

    Raises:
        IoSaveError: If the file cannot be written.
    """
    out = Path(path)
    page = render_document(results, settings)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(page, encoding="utf-8")
    except OSError as exc:
        raise IoSaveError(f"failed to write document to {out}: {exc}") from exc
    logger.info("wrote tour document to %s", out)
    return out
