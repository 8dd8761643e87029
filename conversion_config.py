"""
Conversion configuration.

Defaults live in constantStorage/ascii_constants.py (via settings) and are
read once into a ConversionDefaults. ConversionConfig is built fully
populated and validated; nothing mutates it afterwards.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import settings
from errors import InvalidConfig
from glyph_table import printable_ascii

SELECTION_NEAREST = "nearest"
SELECTION_PROPORTIONAL = "proportional"
SELECTION_MODES = (SELECTION_NEAREST, SELECTION_PROPORTIONAL)


@dataclass(frozen=True)
class ConversionDefaults:
    """Every default the converter and CLI fall back to."""
    max_res: int = 100
    adjustment: float = 17.0 / 8.0
    invert: bool = False
    selection: str = SELECTION_NEAREST
    measured_chars: str = field(default_factory=printable_ascii)
    proportional_chars: str = " ,.1ijts79yarcnvemCPLOTVASEHNDRG8BWM"
    font_path: Optional[str] = None
    font_size: int = 16
    output_file: str = "ascii.txt"

    @classmethod
    def from_settings(cls) -> "ConversionDefaults":
        first = getattr(settings, 'ASCII_PRINTABLE_FIRST', 32)
        last = getattr(settings, 'ASCII_PRINTABLE_LAST', 126)
        return cls(
            max_res=getattr(settings, 'ASCII_MAX_RES', cls.max_res),
            adjustment=getattr(settings, 'ASCII_ADJUSTMENT', cls.adjustment),
            invert=getattr(settings, 'ASCII_INVERT', cls.invert),
            selection=getattr(settings, 'ASCII_SELECTION', cls.selection),
            measured_chars=printable_ascii(first, last),
            proportional_chars=getattr(settings, 'ASCII_PALETTE_DARK', cls.proportional_chars),
            font_path=getattr(settings, 'ASCII_FONT_PATH', cls.font_path),
            font_size=getattr(settings, 'ASCII_FONT_SIZE', cls.font_size),
            output_file=getattr(settings, 'ASCII_OUTPUT_FILE', cls.output_file),
        )

    def chars_for(self, selection: str) -> str:
        if selection == SELECTION_PROPORTIONAL:
            return self.proportional_chars
        return self.measured_chars


_defaults: Optional[ConversionDefaults] = None


def get_defaults() -> ConversionDefaults:
    """Defaults resolved from settings on first use."""
    global _defaults
    if _defaults is None:
        _defaults = ConversionDefaults.from_settings()
    return _defaults


@dataclass(frozen=True)
class ConversionConfig:
    """
    Validated conversion parameters.

    Attributes:
        max_res: Bound on target width and height, in character cells.
        adjustment: Glyph cell height / width ratio applied to the height.
        invert: Flip brightness before choosing glyphs.
        chars: Characters to draw with. In "nearest" mode they are measured
            and sorted; in "proportional" mode they must already run from
            darkest to lightest.
        selection: "nearest" or "proportional".
        font_path: TrueType font used to measure glyphs (None = built-in).
        font_size: Font size used to measure glyphs.
    """
    max_res: int = 100
    adjustment: float = 17.0 / 8.0
    invert: bool = False
    chars: Optional[str] = None
    selection: str = SELECTION_NEAREST
    font_path: Optional[str] = None
    font_size: int = 16

    def __post_init__(self):
        if self.selection not in SELECTION_MODES:
            raise InvalidConfig(
                f"Unknown selection mode {self.selection!r}; expected one of {SELECTION_MODES}"
            )
        if self.chars is None:
            object.__setattr__(self, 'chars', get_defaults().chars_for(self.selection))

        if isinstance(self.max_res, bool) or not isinstance(self.max_res, int) or self.max_res <= 0:
            raise InvalidConfig(f"max_res must be a positive integer, got {self.max_res!r}")
        if not isinstance(self.adjustment, (int, float)) or not math.isfinite(self.adjustment) \
                or self.adjustment <= 0:
            raise InvalidConfig(f"adjustment must be a positive number, got {self.adjustment!r}")
        if not isinstance(self.chars, str) or not self.chars:
            raise InvalidConfig("chars must be a non-empty string")
        if isinstance(self.font_size, bool) or not isinstance(self.font_size, int) or self.font_size <= 0:
            raise InvalidConfig(f"font_size must be a positive integer, got {self.font_size!r}")

    @classmethod
    def resolve(
        cls,
        max_res: Optional[int] = None,
        adjustment: Optional[float] = None,
        chars: Optional[str] = None,
        invert: bool = False,
        selection: Optional[str] = None,
        font_path: Optional[str] = None,
        font_size: Optional[int] = None,
        defaults: Optional[ConversionDefaults] = None,
    ) -> "ConversionConfig":
        """
        Build a config from loosely-checked user input.

        Missing, non-positive or empty values are replaced with defaults
        before validation, so only genuinely unusable input (an unknown
        selection mode) still raises InvalidConfig.
        """
        if defaults is None:
            defaults = get_defaults()

        if max_res is None or max_res <= 0:
            if max_res is not None:
                logging.debug(f"max_res {max_res} is not positive, using {defaults.max_res}")
            max_res = defaults.max_res
        if adjustment is None or not math.isfinite(adjustment) or adjustment <= 0:
            if adjustment is not None:
                logging.debug(f"adjustment {adjustment} is not a positive number, using {defaults.adjustment}")
            adjustment = defaults.adjustment
        if font_size is None or font_size <= 0:
            font_size = defaults.font_size
        selection = selection or defaults.selection
        if not chars:
            chars = defaults.chars_for(selection)

        return cls(
            max_res=max_res,
            adjustment=adjustment,
            invert=bool(invert) or defaults.invert,
            chars=chars,
            selection=selection,
            font_path=font_path or defaults.font_path,
            font_size=font_size,
        )
