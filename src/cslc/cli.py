"""Command-line interface for the CSL style compiler."""

from __future__ import annotations

import argparse
import logging
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from cslc.errors import StyleError, StyleInputError, StyleParseError
from cslc.options import SecondFieldAlign, bib_formatting_params
from cslc.style import DEFAULT_LOCALE, CompiledStyle

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    locale: str | None
    locale_file: Path | None
    locale_dirs: list[Path]
    debug: bool
    verbose: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="cslc",
        description="Compile a CSL style and summarize the result",
    )
    p.add_argument("input", help="Input .csl style file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument("-l", "--locale", metavar="LANG", help="Requested locale (default: style default-locale)")
    p.add_argument("--locale-file", metavar="FILE", help="Standalone locales-xx-XX.xml to merge in")
    p.add_argument(
        "--locales-dir",
        action="append",
        default=[],
        metavar="DIR",
        help="Directory searched for locales-<lang>.xml (repeatable)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover cslc.toml)",
    )
    p.add_argument("--debug", action="store_true", help="Dump the parsed style tree to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Log compiler decisions")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "cslc.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    cfg_locale = config.get("locale")
    if not isinstance(cfg_locale, dict):
        cfg_locale = {}

    # Locale: config < CLI
    locale: str | None = None
    if isinstance(cfg_locale.get("lang"), str):
        locale = cfg_locale["lang"]
    if args.locale:
        locale = args.locale

    # Locale file: config < CLI (config paths are relative to the style)
    locale_file: Path | None = None
    if isinstance(cfg_locale.get("file"), str):
        locale_file = input_dir / cfg_locale["file"]
    if args.locale_file:
        locale_file = Path(args.locale_file)

    # Locale search dirs: config, then CLI
    locale_dirs: list[Path] = []
    cfg_dirs = cfg_locale.get("dirs")
    if isinstance(cfg_dirs, list):
        locale_dirs.extend(input_dir / str(d) for d in cfg_dirs)
    locale_dirs.extend(Path(d) for d in args.locales_dir)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        locale=locale,
        locale_file=locale_file,
        locale_dirs=locale_dirs,
        debug=args.debug,
        verbose=args.verbose,
    )


def compile_file(options: CliOptions) -> CompiledStyle:
    """Read, parse, localize and compile a style file."""
    from cslc.debug import dump_tree
    from cslc.locale import find_locale_file, load_locale
    from cslc.parser import parse, read_style, source_text
    from cslc.style import build_style

    data = read_style(options.input_file)
    try:
        uses_year_suffix, root = parse(data)
        if options.debug:
            dump_tree(root)

        requested = options.locale or root.attrs.get("default-locale") or DEFAULT_LOCALE
        locale_path = options.locale_file
        if locale_path is None and options.locale_dirs:
            locale_path = find_locale_file(requested, options.locale_dirs)
            if locale_path is None:
                logger.warning("no locale file found for %s", requested)
        locale_data = load_locale(locale_path) if locale_path is not None else None

        return build_style(root, uses_year_suffix, requested, locale_data)
    except StyleError as exc:
        if not exc.source:
            exc.source = source_text(data)
        raise


def format_summary(style: CompiledStyle) -> str:
    """Plain-text report of a compiled style."""
    lines = [
        f"title: {style.info_text('title') or '-'}",
        f"id: {style.info_text('id') or '-'}",
        f"citation format: {'note' if style.cite_note else 'in-text'}",
        f"locale: {style.locale}",
        f"uses year-suffix variable: {'yes' if style.uses_year_suffix_var else 'no'}",
    ]
    for label, opts in (
        ("style options", style.options),
        ("citation options", style.cite_options),
        ("bibliography options", style.bib_options),
        ("locale options", style.locale_options),
    ):
        lines.append(f"{label}:")
        lines.extend(f"  {k} = {v!r}" for k, v in sorted(opts.items()))
    lines.append(f"macros: {', '.join(sorted(style.macros)) or '-'}")
    lines.append(f"citation sort: {_orders(style.cite_sort_orders)}")
    lines.append(f"bibliography sort: {_orders(style.bib_sort_orders)}")
    lines.append(f"terms: {len(style.terms or ())}")
    lines.append("bibliography formatting:")
    for k, v in bib_formatting_params(style.bib_options).items():
        shown = v.value if isinstance(v, SecondFieldAlign) else v
        lines.append(f"  {k} = {shown!r}")
    return "\n".join(lines) + "\n"


def _orders(orders: tuple[bool, ...] | None) -> str:
    if orders is None:
        return "-"
    return ", ".join("ascending" if asc else "descending" for asc in orders)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)
    options = resolve_options(args)

    logging.basicConfig(
        level=logging.DEBUG if options.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        style = compile_file(options)
        report = format_summary(style)
    except (StyleInputError, StyleParseError) as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except StyleError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 2

    if options.output_file:
        options.output_file.write_text(report, encoding="utf-8")
    else:
        sys.stdout.write(report)

    return 0
