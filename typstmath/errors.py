"""Exception types for the conversion, rendering and clipboard stages."""

from __future__ import annotations


class TypstMathError(Exception):
    """Base class for every error raised by typstmath."""


# -----------------------------
# Conversion (shown to the user)
# -----------------------------
class ConversionError(TypstMathError):
    pass


class ConverterUnavailable(ConversionError):
    pass


class PipeWriteError(ConversionError):
    pass


class PipeReadError(ConversionError):
    pass


class ConverterExitError(ConversionError):
    pass


class ConverterTimeout(ConversionError):
    pass


# -----------------------------
# Rendering (logged only)
# -----------------------------
class RenderError(TypstMathError):
    pass


class FormulaSyntaxError(RenderError):
    pass


class VectorParseError(RenderError):
    pass


class BitmapAllocationError(RenderError):
    pass


# -----------------------------
# Clipboard (logged only)
# -----------------------------
class ClipboardError(TypstMathError):
    pass


class ClipboardUnavailable(ClipboardError):
    pass


class ClipboardWriteError(ClipboardError):
    pass
