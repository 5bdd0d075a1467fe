"""Shared fakes for the converter, rasterizer and clipboard capabilities."""

from __future__ import annotations

import os
import stat
import sys
import textwrap
from pathlib import Path

import pytest
from PIL import Image

from typstmath.errors import ConverterExitError, FormulaSyntaxError
from typstmath.state import AppController, Services


class FakeConverter:
    """Maps known inputs to LaTeX; anything else fails like pandoc would."""

    def __init__(self, results: dict[str, str] | None = None, error: Exception | None = None):
        self.results = results or {}
        self.error = error
        self.calls: list[str] = []

    def convert(self, text: str) -> str:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        if text not in self.results:
            raise ConverterExitError("unexpected end of input")
        return self.results[text]


class FakeRasterizer:
    """Draws a fixed-size black box for any formula not listed as invalid."""

    def __init__(self, invalid: tuple[str, ...] = ()):
        self.invalid = invalid
        self.calls: list[tuple[str, bool]] = []

    def render(self, latex: str, dark_mode: bool) -> Image.Image:
        self.calls.append((latex, dark_mode))
        if latex in self.invalid:
            raise FormulaSyntaxError(f"Unknown symbol: {latex}")
        color = (255, 255, 255, 255) if dark_mode else (0, 0, 0, 255)
        return Image.new("RGBA", (10 * len(latex), 8), color)


class FakeClipboard:
    def __init__(self) -> None:
        self.copied: list[str] = []

    def copy(self, text: str) -> bool:
        self.copied.append(text)
        return True


@pytest.fixture
def converter() -> FakeConverter:
    return FakeConverter({"x^2": "x^{2}", "a / b": r"\frac{a}{b}", "bad": r"\nosuchcommand"})


@pytest.fixture
def rasterizer() -> FakeRasterizer:
    return FakeRasterizer(invalid=(r"\nosuchcommand", r"\frac{"))


@pytest.fixture
def clipboard() -> FakeClipboard:
    return FakeClipboard()


@pytest.fixture
def services(converter, rasterizer, clipboard) -> Services:
    return Services(converter=converter, rasterizer=rasterizer, clipboard=clipboard)


@pytest.fixture
def controller(services) -> AppController:
    return AppController(services)


@pytest.fixture
def make_executable(tmp_path: Path):
    """Write a Python script that stands in for pandoc and return its path."""
    if sys.platform == "win32":  # pragma: no cover - shebang scripts are POSIX only
        pytest.skip("fake executables need a POSIX shell")

    def _make(body: str, name: str = "pandoc") -> str:
        path = tmp_path / name
        path.write_text(f"#!{sys.executable}\nimport sys, time\n" + textwrap.dedent(body), encoding="utf-8")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return os.fspath(path)

    return _make
