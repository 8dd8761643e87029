"""
Exceptions raised by the image -> ascii pipeline.

Everything derives from AsciiArtError so the CLI can report any pipeline
failure in one place. Value-style errors also subclass ValueError.
"""


class AsciiArtError(Exception):
    """Base class for all conversion errors."""


class InvalidArgument(AsciiArtError, ValueError):
    """A required argument (e.g. the image filename) is missing."""


class ImageDecodeError(AsciiArtError, OSError):
    """The source image could not be read or decoded."""


class EmptyCharacterSet(AsciiArtError, ValueError):
    """No characters were given to build the brightness table from."""


class InvalidConfig(AsciiArtError, ValueError):
    """A configuration value is out of range after default substitution."""


class InvalidImageDimensions(AsciiArtError, ValueError):
    """An image (or a rasterized glyph) has zero width or height."""
