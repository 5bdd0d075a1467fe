"""Typst to LaTeX math converter with a rendered preview."""

__version__ = "0.1.0"
