"""
Command line interface for the tour.

Usage:
    gapviz list
    gapviz show <slug> [--format html|png|svg|json] [--out PATH]
    gapviz build [--out PATH] [--theme NAME] [--width PX] [--height PX]

Every command accepts --config PATH (TOML settings file) and --log-level LEVEL.
Settings are resolved as command-line flag > environment (GAPVIZ_*) > TOML > defaults.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from gapviz.core.errors import LessonNotFoundError, ReshapeError, SchemaError, SpecError
from gapviz.io.config import IMAGE_FORMATS, LOG_LEVELS, THEME_NAMES, RenderSettings
from gapviz.io.errors import IoError
from gapviz.io.save import save_chart
from gapviz.tour.document import write_document
from gapviz.tour.lessons import LESSONS, run_lesson
from gapviz.viz.render import build_chart

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Route library logging to stderr at `level`, replacing existing root handlers."""
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--config", type=str, default=None, help="TOML settings file.")
    p.add_argument(
        "--log-level",
        type=str.upper,
        choices=sorted(LOG_LEVELS),
        default=None,
        help="Logging level (default: from settings).",
    )


def _add_size(p: argparse.ArgumentParser) -> None:
    p.add_argument("--theme", choices=sorted(THEME_NAMES), default=None, help="Base theme.")
    p.add_argument("--width", type=int, default=None, help="Figure width in pixels.")
    p.add_argument("--height", type=int, default=None, help="Figure height in pixels.")


def _settings(args: argparse.Namespace) -> RenderSettings:
    s = RenderSettings.load(args.config)
    overrides = {
        key: getattr(args, key)
        for key in ("theme", "width", "height", "log_level")
        if getattr(args, key, None) is not None
    }
    s = replace(s, **overrides).validate()
    configure_logging(s.log_level)
    return s


def _cmd_list(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="gapviz list", description="List the tour's lessons.")
    _add_common(p)
    args = p.parse_args(argv)
    _settings(args)

    for lesson in LESSONS:
        print(f"{lesson.slug:<28} {lesson.section} / {lesson.title}")
    return 0


def _cmd_show(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="gapviz show",
        description="Build one lesson: save its chart, or print its table.",
    )
    p.add_argument("slug", help="Lesson slug (see `gapviz list`).")
    p.add_argument("--format", dest="fmt", choices=sorted(IMAGE_FORMATS), default=None)
    p.add_argument("--out", type=str, default=None, help="Output path (chart) or CSV path (table).")
    _add_size(p)
    _add_common(p)
    args = p.parse_args(argv)
    settings = _settings(args)

    result = run_lesson(args.slug)
    if result.kind == "table":
        print(result.output)
        if args.out:
            out = Path(args.out)
            out.parent.mkdir(parents=True, exist_ok=True)
            result.output.write_csv(out)
            print(f"[INFO] Wrote table to {out}")
        return 0

    fmt = args.fmt or settings.image_format
    out = Path(args.out) if args.out else Path(settings.out_dir) / f"{args.slug}.{fmt}"
    chart = build_chart(result.output, settings)
    path = save_chart(chart, out, fmt=args.fmt, settings=settings)
    print(f"[INFO] Wrote {args.slug} to {path}")
    return 0


def _cmd_build(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="gapviz build", description="Render every lesson into one HTML document."
    )
    p.add_argument("--out", type=str, default=None, help="Document path (default: <out_dir>/index.html).")
    _add_size(p)
    _add_common(p)
    args = p.parse_args(argv)
    settings = _settings(args)

    out = Path(args.out) if args.out else Path(settings.out_dir) / "index.html"
    path = write_document(out, settings=settings)
    print(f"[INFO] Wrote {len(LESSONS)} lessons to {path}")
    return 0


_COMMANDS = {"list": _cmd_list, "show": _cmd_show, "build": _cmd_build}


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="gapviz", description="A layered grammar of graphics tour over gapminder."
    )
    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("list", help="List lessons.")
    sub.add_parser("show", help="Build one lesson.")
    sub.add_parser("build", help="Render the tour document.")
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] in ("-h", "--help"):
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    handler = _COMMANDS.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = handler(rest)
    except LessonNotFoundError as exc:
        print(f"[ERROR] {exc.args[0]}", file=sys.stderr)
        code = 2
    except (SpecError, ReshapeError, SchemaError, IoError, RuntimeError) as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
