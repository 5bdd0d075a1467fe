"""LaTeX math -> SVG -> RGBA bitmap.

matplotlib's mathtext engine lays out the formula and writes it as SVG with
glyphs converted to paths, CairoSVG rasterizes the SVG, and Pillow holds the
pixels.
"""

from __future__ import annotations

import io
import logging
import re
import shutil
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Protocol

import matplotlib
matplotlib.use("Agg")
from matplotlib import pyplot as plt
from PIL import Image, ImageChops

from typstmath.errors import BitmapAllocationError, FormulaSyntaxError, VectorParseError

log = logging.getLogger(__name__)

MAGNIFICATION = 5.0
MARGIN = 0.9
FONT_SIZE = 16
USETEX_MODES = ("auto", "always", "never")

SVG_TAG = "{http://www.w3.org/2000/svg}svg"

# CSS pixels per unit, 96 dpi
_UNITS = {
    "": 1.0,
    "px": 1.0,
    "pt": 96.0 / 72.0,
    "pc": 16.0,
    "in": 96.0,
    "cm": 96.0 / 2.54,
    "mm": 96.0 / 25.4,
}
_LENGTH = re.compile(r"^\s*([0-9]*\.?[0-9]+(?:[eE][-+]?[0-9]+)?)\s*([a-z]*)\s*$")


class Rasterizer(Protocol):
    def render(self, latex: str, dark_mode: bool) -> Image.Image: ...


@dataclass(frozen=True)
class VectorScene:
    svg: str
    width: float
    height: float


# -----------------------------
# Helpers
# -----------------------------
def _escape_dollars(text: str) -> str:
    return re.sub(r"(?<!\\)\$", r"\\$", text)


def prepare_mathtext(latex: str) -> str:
    text = _escape_dollars(latex.strip())
    # mathtext has no \text, \mathrm is the closest
    text = re.sub(r"\\text\{([^}]*)\}", r"\\mathrm{\1}", text)
    text = re.sub(r"\s+", " ", text)
    return f"${text}$"


def prepare_usetex(latex: str) -> str:
    # A blank line would end the paragraph inside the math
    text = re.sub(r"\s+", " ", _escape_dollars(latex.strip()))
    return f"$\\displaystyle {text}$"


def tex_available() -> bool:
    return shutil.which("latex") is not None


def parse_length(value: str | None) -> float | None:
    if value is None:
        return None
    m = _LENGTH.match(value)
    if not m or m.group(2) not in _UNITS:
        return None
    return float(m.group(1)) * _UNITS[m.group(2)]


def invert_colors(image: Image.Image) -> Image.Image:
    """Invert R, G and B; alpha is kept as is."""
    r, g, b, a = image.convert("RGBA").split()
    return Image.merge("RGBA", (ImageChops.invert(r), ImageChops.invert(g), ImageChops.invert(b), a))


class FormulaRasterizer:
    def __init__(self, scale: float = MAGNIFICATION, margin: float = MARGIN, fontsize: int = FONT_SIZE,
                 usetex: str = "auto"):
        if usetex not in USETEX_MODES:
            raise ValueError(f"usetex must be one of {USETEX_MODES}, got {usetex!r}")
        self.scale = scale
        self.margin = margin
        self.fontsize = fontsize
        self.usetex = usetex

    def render(self, latex: str, dark_mode: bool) -> Image.Image:
        scene = self.parse_svg(self.formula_to_svg(latex))
        image = self.rasterize(scene)
        if dark_mode:
            image = invert_colors(image)
        return image

    def formula_to_svg(self, latex: str) -> str:
        if self.usetex == "always":
            return self._draw(prepare_usetex(latex), usetex=True)
        try:
            return self._draw(prepare_mathtext(latex), usetex=False)
        except FormulaSyntaxError:
            # Environments such as pmatrix or cases need a real TeX install
            if self.usetex != "auto" or not tex_available():
                raise
            log.debug("mathtext rejected %r, retrying with usetex", latex)
            return self._draw(prepare_usetex(latex), usetex=True)

    def _draw(self, content: str, usetex: bool) -> str:
        rc = {
            "text.usetex": usetex,
            "text.latex.preamble": r"\usepackage{amsmath}\usepackage{amssymb}",
            "svg.fonttype": "path",
            "mathtext.fontset": "cm",
        }
        with matplotlib.rc_context(rc):
            fig = plt.figure(figsize=(6, 1))
            fig.patch.set_alpha(0.0)
            ax = fig.add_axes([0, 0, 1, 1])
            ax.axis("off")
            try:
                ax.text(0.0, 0.5, content, ha="left", va="center", fontsize=self.fontsize, color="black")
                buf = io.StringIO()
                fig.savefig(buf, format="svg", transparent=True, bbox_inches="tight", pad_inches=0.02)
                return buf.getvalue()
            except Exception as e:
                raise FormulaSyntaxError(f"Failed to convert LaTeX to SVG: {e}") from e
            finally:
                plt.close(fig)

    def parse_svg(self, svg: str) -> VectorScene:
        try:
            root = ET.fromstring(svg)
        except ET.ParseError as e:
            raise VectorParseError(f"Malformed SVG: {e}") from e
        if root.tag not in (SVG_TAG, "svg"):
            raise VectorParseError(f"Expected an <svg> root element, got <{root.tag}>")

        width = parse_length(root.get("width"))
        height = parse_length(root.get("height"))
        if width is None or height is None:
            box = (root.get("viewBox") or "").replace(",", " ").split()
            try:
                width, height = float(box[2]), float(box[3])
            except (IndexError, ValueError) as e:
                raise VectorParseError("SVG has no usable width/height or viewBox") from e
        return VectorScene(svg=svg, width=width, height=height)

    def rasterize(self, scene: VectorScene) -> Image.Image:
        width = int(scene.width * self.scale)
        height = int(scene.height * self.scale)
        if width <= 0 or height <= 0:
            raise BitmapAllocationError(f"Failed to create pixmap of size {width}x{height}")
        try:
            canvas = Image.new("RGBA", (width, height), (0, 0, 0, 0))
        except (ValueError, MemoryError) as e:
            raise BitmapAllocationError(f"Failed to create pixmap of size {width}x{height}") from e

        try:
            import cairosvg
        except (ImportError, OSError) as e:
            # OSError: the cairo shared library itself is missing
            raise BitmapAllocationError(f"CairoSVG is not usable: {e}") from e

        try:
            png = cairosvg.svg2png(bytestring=scene.svg.encode("utf-8"), scale=self.scale * self.margin)
        except Exception as e:
            raise BitmapAllocationError(f"Failed to rasterize SVG: {e}") from e

        with Image.open(io.BytesIO(png)) as drawn:
            canvas.paste(drawn.convert("RGBA"), (0, 0))
        log.debug("rendered %dx%d bitmap", width, height)
        return canvas
