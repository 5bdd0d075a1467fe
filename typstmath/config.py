"""Command line options and fixed UI constants.

There is no configuration file; everything here is a default that can be
overridden from the command line.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass
from typing import Optional, Sequence

from typstmath.rasterizer import USETEX_MODES

WINDOW_TITLE = "Typst to LaTeX Math Converter"
WINDOW_SIZE = (450, 400)
FONT_SIZE = 16

DEFAULT_THEME = "aquativo"
DARK_THEMES = frozenset({"equilux", "black"})


@dataclass(frozen=True)
class AppConfig:
    pandoc: str = "pandoc"
    timeout: Optional[float] = None
    theme: str = DEFAULT_THEME
    dark_mode: bool = False
    log_level: str = "WARNING"
    usetex: str = "auto"


def _positive(value: str) -> float:
    seconds = float(value)
    if seconds <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="typstmath", description="Convert Typst math to LaTeX and preview it.")
    parser.add_argument("--pandoc", default="pandoc", help="pandoc executable (default: pandoc from PATH).")
    parser.add_argument("--timeout", type=_positive, default=None,
                        help="Give up on pandoc after this many seconds (default: wait forever).")
    parser.add_argument("--theme", default=DEFAULT_THEME, help=f"ttkthemes theme (default: {DEFAULT_THEME}).")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--dark", dest="dark", action="store_true", default=None, help="Force dark mode.")
    mode.add_argument("--light", dest="dark", action="store_false", help="Force light mode.")
    parser.add_argument("--log-level", default="WARNING", type=str.upper,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Diagnostic verbosity (default: WARNING).")
    parser.add_argument("--usetex", default="auto", choices=USETEX_MODES,
                        help="Render with a TeX install: when mathtext fails (auto), always, or never (default: auto).")
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> AppConfig:
    args = build_parser().parse_args(argv)
    dark = args.theme in DARK_THEMES if args.dark is None else args.dark
    return AppConfig(
        pandoc=args.pandoc,
        timeout=args.timeout,
        theme=args.theme,
        dark_mode=dark,
        log_level=args.log_level,
        usetex=args.usetex,
    )
