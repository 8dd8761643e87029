import logging
from typing import Callable, List, Optional, Tuple, Union

import cv2
import numpy as np

from conversion_config import ConversionConfig, SELECTION_PROPORTIONAL
from errors import InvalidImageDimensions
from glyph_table import GlyphBrightnessTable, GlyphRasterizer, build_glyph_table, luma

Resampler = Callable[[np.ndarray, int, int], np.ndarray]

# dtypes cv2.resize has kernels for
RESIZE_DTYPES = (np.uint8, np.uint16, np.int16, np.float32, np.float64)


def resize_bicubic(image, width, height):
    """Resample to exactly width x height with bicubic interpolation."""
    image = np.asarray(image)
    if image.dtype.type not in RESIZE_DTYPES:
        # bool, int64 and friends keep their values as float32
        image = image.astype(np.float32)
    return cv2.resize(np.ascontiguousarray(image), (width, height), interpolation=cv2.INTER_CUBIC)


# 1. GLYPH SELECTION
class GlyphSelector:
    """Maps a grid of brightness values (0.0 .. 1.0) to a grid of characters."""
    name = "abstract"

    def select(self, brightness: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class NearestBrightnessSelector(GlyphSelector):
    """
    Binary search over a measured table: find the two entries bracketing
    each value and take the closer one. Equal distance goes to the darker
    (lower index) entry.
    """
    name = "nearest"

    def __init__(self, table: GlyphBrightnessTable):
        self.table = table

    def select(self, brightness):
        brightness = np.asarray(brightness, dtype=np.float64)
        values = self.table.brightness
        chars = self.table.chars
        if len(values) == 1:
            return np.full(brightness.shape, chars[0])

        high = np.clip(np.searchsorted(values, brightness, side='left'), 1, len(values) - 1)
        low = high - 1
        pick_high = (values[high] - brightness) < (brightness - values[low])
        return chars[np.where(pick_high, high, low)]


class ProportionalIndexSelector(GlyphSelector):
    """
    No measurement: the characters are assumed to be ordered dark -> light
    and evenly spaced, so the index is round((n - 1) * brightness).
    """
    name = "proportional"

    def __init__(self, chars: str):
        if not chars:
            raise ValueError("ProportionalIndexSelector needs at least one character")
        self.chars = np.asarray(list(chars))

    def select(self, brightness):
        brightness = np.asarray(brightness, dtype=np.float64)
        last = len(self.chars) - 1
        indices = np.floor(brightness * last + 0.5).astype(int)
        return self.chars[np.clip(indices, 0, last)]


def closest_char(table: GlyphBrightnessTable, brightness: float) -> str:
    """Single-value form of NearestBrightnessSelector."""
    return str(NearestBrightnessSelector(table).select(np.array([brightness]))[0])


def build_selector(config: ConversionConfig, rasterize=None) -> GlyphSelector:
    """Build the selector config.selection asks for (measuring glyphs if needed)."""
    if config.selection == SELECTION_PROPORTIONAL:
        selector = ProportionalIndexSelector(config.chars)
    else:
        if rasterize is None:
            rasterize = GlyphRasterizer(config.font_path, config.font_size)
        selector = NearestBrightnessSelector(build_glyph_table(config.chars, rasterize))
    logging.info(f"Glyph selection: {selector.name}")
    return selector


def as_selector(table: Union[GlyphSelector, GlyphBrightnessTable, str]) -> GlyphSelector:
    if isinstance(table, GlyphSelector):
        return table
    if isinstance(table, GlyphBrightnessTable):
        return NearestBrightnessSelector(table)
    if isinstance(table, str):
        return ProportionalIndexSelector(table)
    raise TypeError(f"Cannot select glyphs from {type(table).__name__}")


# 2. GEOMETRY
def calculate_target_size(width: int, height: int, max_res: int, adjustment: float) -> Tuple[int, int]:
    """
    Fit width x height inside max_res x max_res keeping the aspect ratio,
    then divide the height by the glyph cell ratio. Halves round up; neither
    side drops below one cell.
    """
    if width <= 0 or height <= 0:
        raise InvalidImageDimensions(f"Image has degenerate size {width}x{height}")
    ratio = min(max_res / width, max_res / height)
    new_w = max(1, int(width * ratio + 0.5))
    new_h = max(1, int(height * ratio / adjustment + 0.5))
    return new_w, new_h


# 3. CONVERSION
class ImageConverter:
    """
    Turns decoded RGB images into lines of text.

    The selector (and so the measured glyph table) is built once and reused
    for every image passed to convert().
    """

    def __init__(self, config: ConversionConfig, selector: Optional[GlyphSelector] = None,
                 resample: Resampler = resize_bicubic):
        self.config = config
        self.selector = selector if selector is not None else build_selector(config)
        self.resample = resample

    def target_size(self, width, height):
        return calculate_target_size(width, height, self.config.max_res, self.config.adjustment)

    def brightness_grid(self, pixels) -> np.ndarray:
        brightness = np.clip(luma(pixels) / 255.0, 0.0, 1.0)
        if self.config.invert:
            brightness = 1.0 - brightness
        return brightness

    def convert(self, image) -> List[str]:
        image = np.asarray(image)
        if image.ndim < 2:
            raise InvalidImageDimensions(f"Expected a 2-D pixel grid, got shape {image.shape}")
        h, w = image.shape[:2]
        new_w, new_h = self.target_size(w, h)

        resized = np.asarray(self.resample(image, new_w, new_h))
        if resized.shape[:2] != (new_h, new_w):
            raise InvalidImageDimensions(
                f"Resampler returned {resized.shape[1]}x{resized.shape[0]}, expected {new_w}x{new_h}"
            )
        logging.debug(f"Resampled {w}x{h} -> {new_w}x{new_h}")

        char_grid = self.selector.select(self.brightness_grid(resized))
        return ["".join(row) for row in char_grid]


def convert(image, table, config: ConversionConfig, resample: Resampler = resize_bicubic) -> List[str]:
    """One-shot conversion with an already built table (or selector, or raw ramp)."""
    return ImageConverter(config, as_selector(table), resample).convert(image)


def render(lines: List[str]) -> str:
    return "\n".join(lines)
