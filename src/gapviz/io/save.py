"""
Chart export helpers.

Overview
- save(): write one chart to any combination of HTML, PNG, SVG, and Vega-Lite JSON.
- save_chart(): write one chart to a single path, choosing the format from the suffix
  (or RenderSettings.image_format when the path has none).

Notes
- HTML and JSON need only Altair. PNG/SVG need the optional `vl-convert-python`
  converter; its absence raises RuntimeError before anything is written.
- Parent directories are created as needed.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path

import altair as alt

from .config import IMAGE_FORMATS, RenderSettings
from .errors import IoConfigError, IoSaveError

logger = logging.getLogger(__name__)

__all__ = ["save", "save_chart", "require_image_converter"]


def require_image_converter() -> None:
    """Raise RuntimeError if the PNG/SVG converter is not importable."""
    try:
        importlib.import_module("vl_convert")
    except ImportError as exc:
        raise RuntimeError(
            "PNG/SVG export requires the optional converter; install vl-convert-python "
            "(pip install 'gapviz[image]')."
        ) from exc


def _write(chart: alt.TopLevelMixin, path: Path, fmt: str, scale_factor: float) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if fmt == "json":
            path.write_text(chart.to_json(indent=2), encoding="utf-8")
        elif fmt == "png":
            chart.save(str(path), format="png", scale_factor=scale_factor)
        else:
            chart.save(str(path), format=fmt)
    except OSError as exc:
        raise IoSaveError(f"failed to write {fmt} chart to {path}: {exc}") from exc
    logger.info("wrote %s chart to %s", fmt, path)
    return path


def save(
    chart: alt.TopLevelMixin,
    *,
    out_html: str | None = None,
    out_png: str | None = None,
    out_svg: str | None = None,
    out_json: str | None = None,
    scale_factor: float = 2.0,
) -> list[Path]:
    """Save a chart to one or more formats.

    Args:
        chart (alt.TopLevelMixin): Chart to export.
        out_html (str | None): Standalone HTML page path.
        out_png (str | None): PNG path (requires vl-convert-python).
        out_svg (str | None): SVG path (requires vl-convert-python).
        out_json (str | None): Vega-Lite JSON path.
        scale_factor (float): Pixel density multiplier for PNG.

    Returns:
        list[Path]: Paths written, in html/png/svg/json order.

    Raises:
        RuntimeError: If an image format is requested without the converter installed.
        IoSaveError: If a file cannot be written.
    """
    if out_png or out_svg:
        require_image_converter()
    written: list[Path] = []
    for fmt, out in (("html", out_html), ("png", out_png), ("svg", out_svg), ("json", out_json)):
        if out:
            written.append(_write(chart, Path(out), fmt, scale_factor))
    return written


def save_chart(
    chart: alt.TopLevelMixin,
    path: str | Path,
    *,
    fmt: str | None = None,
    settings: RenderSettings | None = None,
) -> Path:
    """Save a chart to a single file.

    The format is, in order of preference: `fmt`, the path suffix, then
    `settings.image_format`. A path without a suffix gets one appended.

    Raises:
        IoConfigError: If the resolved format is unknown.
        RuntimeError: If PNG/SVG is requested without the converter installed.
        IoSaveError: If the file cannot be written.
    """
    settings = settings or RenderSettings()
    p = Path(path)
    resolved = (fmt or p.suffix.lstrip(".") or settings.image_format).lower()
    if resolved not in IMAGE_FORMATS:
        raise IoConfigError(f"unknown chart format {resolved!r} (known: {sorted(IMAGE_FORMATS)})")
    if not p.suffix:
        p = p.with_suffix("." + resolved)
    (written,) = save(
        chart, scale_factor=settings.scale_factor, **{f"out_{resolved}": str(p)}
    )
    return written
