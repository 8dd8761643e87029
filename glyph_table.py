"""
Glyph brightness measurement and the sorted lookup table built from it.

Every candidate character is drawn white-on-black into its own cell, the
cell's average luma is its brightness, and the table keeps one glyph per
distinct brightness in ascending order, normalized to 0.0 .. 1.0.
"""
import logging
import math
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, Iterable, List, NamedTuple, Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from errors import EmptyCharacterSet, InvalidConfig, InvalidImageDimensions

# Perceived brightness weights for R, G, B (applied to squared channels)
LUMA_WEIGHTS = np.array([0.241, 0.691, 0.068], dtype=np.float64)

DEFAULT_FONT_SIZE = 16
FOREGROUND = (255, 255, 255)
BACKGROUND = (0, 0, 0)

# Tall and deep glyphs together give the full line height of the font
CELL_REFERENCE = "Mgjy|"


def luma(pixels) -> np.ndarray:
    """
    sqrt(0.241*r^2 + 0.691*g^2 + 0.068*b^2) for every pixel.

    Accepts an RGB(A) array (..., 3|4), a grayscale array (h, w) or a single
    (r, g, b) triple. Grayscale values are treated as r = g = b. Any 2-D
    input is an (h, w) grayscale grid, so a flat list of n RGB triples must
    be passed as (1, n, 3). Glyph measurement and image conversion both go
    through here so their values stay comparable.
    """
    arr = np.asarray(pixels, dtype=np.float64)
    if arr.ndim in (0, 2):
        arr = np.repeat(arr[..., None], 3, axis=-1)
    elif arr.shape[-1] == 1:
        arr = np.repeat(arr, 3, axis=-1)
    rgb = arr[..., :3]
    return np.sqrt((rgb * rgb) @ LUMA_WEIGHTS)


def glyph_brightness(grid) -> float:
    """Mean luma over every pixel of a rasterized glyph."""
    values = luma(grid)
    if values.size == 0:
        raise InvalidImageDimensions("rasterized glyph has no pixels")
    return float(values.mean())


def printable_ascii(first: int = 32, last: int = 126) -> str:
    """Characters first..last inclusive (space through tilde by default)."""
    return "".join(chr(code) for code in range(first, last + 1))


def load_font(font_path: Optional[str] = None, font_size: int = DEFAULT_FONT_SIZE):
    if font_path:
        try:
            return ImageFont.truetype(font_path, font_size)
        except OSError as e:
            raise InvalidConfig(f"Cannot load font '{font_path}': {e}") from e
    return ImageFont.load_default(size=font_size)


class GlyphRasterizer:
    """
    Draws a single character into an RGB cell sized to the font's advance
    width and line height. Callable, so it can be passed straight to
    build_glyph_table.
    """

    def __init__(self, font_path: Optional[str] = None, font_size: int = DEFAULT_FONT_SIZE):
        self.font = load_font(font_path, font_size)
        self.cell_height = max(1, int(math.ceil(self.font.getbbox(CELL_REFERENCE)[3])))

    def cell_width(self, ch: str) -> int:
        right = self.font.getbbox(ch)[2]
        return max(1, int(math.ceil(max(right, self.font.getlength(ch)))))

    def __call__(self, ch: str) -> np.ndarray:
        img = Image.new("RGB", (self.cell_width(ch), self.cell_height), BACKGROUND)
        draw = ImageDraw.Draw(img)
        draw.text((0, 0), ch, fill=FOREGROUND, font=self.font)
        return np.asarray(img)


class Glyph(NamedTuple):
    char: str
    brightness: float


@dataclass(frozen=True)
class GlyphBrightnessTable:
    """Glyphs in strictly increasing brightness order. Never empty."""

    glyphs: Tuple[Glyph, ...]

    def __post_init__(self):
        if not self.glyphs:
            raise EmptyCharacterSet("glyph table needs at least one glyph")
        for prev, cur in zip(self.glyphs, self.glyphs[1:]):
            if not cur.brightness > prev.brightness:
                raise ValueError(
                    f"glyph brightness must be strictly increasing: "
                    f"{prev.char!r}={prev.brightness} then {cur.char!r}={cur.brightness}"
                )

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, float]]) -> "GlyphBrightnessTable":
        return cls(tuple(Glyph(ch, float(b)) for ch, b in pairs))

    @classmethod
    def build(cls, characters: Iterable[str],
              rasterize: Optional[Callable[[str], np.ndarray]] = None) -> "GlyphBrightnessTable":
        return build_glyph_table(characters, rasterize)

    @cached_property
    def chars(self) -> np.ndarray:
        return np.asarray([g.char for g in self.glyphs])

    @cached_property
    def brightness(self) -> np.ndarray:
        return np.asarray([g.brightness for g in self.glyphs], dtype=np.float64)

    def __len__(self):
        return len(self.glyphs)

    def __iter__(self):
        return iter(self.glyphs)

    def __getitem__(self, index):
        return self.glyphs[index]


def _remove_duplicates(glyphs: List[Glyph]) -> List[Glyph]:
    # expects sorted input; keeps the first of each run of equal brightness
    kept: List[Glyph] = []
    for glyph in glyphs:
        if kept and glyph.brightness == kept[-1].brightness:
            continue
        kept.append(glyph)
    return kept


def _normalize(glyphs: List[Glyph]) -> List[Glyph]:
    low = glyphs[0].brightness
    span = glyphs[-1].brightness - low
    if span <= 0:
        return [Glyph(glyphs[0].char, 0.0)]
    return [Glyph(g.char, (g.brightness - low) / span) for g in glyphs]


def build_glyph_table(characters: Iterable[str],
                      rasterize: Optional[Callable[[str], np.ndarray]] = None) -> GlyphBrightnessTable:
    """
    Measure, sort, dedupe and normalize the given characters.

    Args:
        characters: Candidate characters; repeats are allowed.
        rasterize: Callable returning the pixel grid for one character.
            Defaults to a GlyphRasterizer on Pillow's built-in font.

    Returns:
        GlyphBrightnessTable whose first entry is 0.0 and last is 1.0
        (a single entry when every glyph measures the same).

    Raises:
        EmptyCharacterSet: if no characters were given.
    """
    chars = list(characters)
    if not chars:
        raise EmptyCharacterSet("character set is empty")
    if rasterize is None:
        rasterize = GlyphRasterizer()

    measured = [Glyph(ch, glyph_brightness(rasterize(ch))) for ch in chars]
    # stable: equal brightness keeps input order
    measured.sort(key=lambda g: g.brightness)
    unique = _remove_duplicates(measured)
    # normalizing can merge values that were only an ulp apart
    table = GlyphBrightnessTable(tuple(_remove_duplicates(_normalize(unique))))

    logging.info(f"Measured {len(chars)} glyphs -> {len(table)} brightness levels")
    logging.debug(f"Glyph ramp: {''.join(g.char for g in table)!r}")
    return table
