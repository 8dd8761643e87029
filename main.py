"""
Command line entry point: image file in, ascii art text file out.

Usage: ascii-art <filename> [-o output_file] [-a adjustment] [-c chars]
                 [-r max_res] [-i] [-m nearest|proportional]
                 [-f font_path] [-s font_size] [--log-level LEVEL]

Bad numbers for -a/-r/-s and non-positive values fall back to the defaults
with a warning. Unknown flags are ignored so older invocations keep working.
"""
import argparse
import logging
import math
import sys

import settings
from ascii_converter import ImageConverter
from conversion_config import ConversionConfig, SELECTION_MODES, get_defaults
from errors import AsciiArtError, InvalidArgument
from image_loader import ImageLoader

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# short options that always take the next word as their value
VALUE_FLAGS = ("-o", "-a", "-c", "-r", "-m", "-f", "-s")


def setup_logging(log_level: str = "WARNING"):
    """
    Setup logging configuration.
    """
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {log_level}")

    logging.basicConfig(
        level=numeric_level,
        format=getattr(settings, 'LOG_FORMAT', "%(asctime)s [%(levelname)s] %(message)s"),
        handlers=[
            logging.StreamHandler()
        ]
    )
    logging.getLogger().setLevel(numeric_level)


def build_parser() -> argparse.ArgumentParser:
    defaults = get_defaults()
    parser = argparse.ArgumentParser(
        prog="ascii-art",
        description="Convert an image to ascii art using measured glyph brightness.",
    )
    parser.add_argument("image", nargs="?", help="Source image (any format Pillow reads, or .npy/.npz)")
    parser.add_argument("-o", dest="output", default=defaults.output_file,
                        help=f"Resulting text file (default: '{defaults.output_file}')")
    parser.add_argument("-a", dest="adjustment",
                        help=f"Char height to width ratio (default: {defaults.adjustment})")
    parser.add_argument("-c", dest="chars", help="Characters used in building the ascii art")
    parser.add_argument("-r", dest="max_res",
                        help=f"Max resolution of the resulting art (default: {defaults.max_res})")
    parser.add_argument("-i", dest="invert", action="store_true", help="Invert the resulting image")
    parser.add_argument("-m", dest="selection",
                        help=f"Glyph selection, one of {', '.join(SELECTION_MODES)} "
                             f"(default: {defaults.selection})")
    parser.add_argument("-f", dest="font_path", help="TrueType font used to measure glyphs")
    parser.add_argument("-s", dest="font_size",
                        help=f"Font size used to measure glyphs (default: {defaults.font_size})")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS,
                        default=getattr(settings, 'LOG_LEVEL', "WARNING"),
                        help="Logging verbosity (default: WARNING)")
    return parser


def parse_number(value, kind, message):
    """kind(value), or None (= use the default) with a warning when it is not a finite number."""
    if value is None:
        return None
    try:
        number = kind(value)
    except ValueError:
        number = None
    # nan and inf parse as floats but are no more usable than "abc"
    if number is None or not math.isfinite(number):
        logging.warning(f"{message}.. Using default")
        return None
    return number


def attach_option_values(argv):
    """
    Rewrite "-c VALUE" as "-c=VALUE" so values starting with "-" (a
    character set like "-=+", a negative adjustment) are never taken for
    flags.
    """
    attached = []
    i = 0
    while i < len(argv):
        token = argv[i]
        if token in VALUE_FLAGS and i + 1 < len(argv) and argv[i + 1]:
            attached.append(f"{token}={argv[i + 1]}")
            i += 2
            continue
        attached.append(token)
        i += 1
    return attached


def write_ascii(lines, output_path):
    # text mode turns "\n" into the platform line terminator
    with open(output_path, "w", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    parser = build_parser()
    if not argv:
        parser.print_usage(sys.stderr)
        return 1

    args, unknown = parser.parse_known_args(attach_option_values(argv))
    setup_logging(args.log_level)
    if unknown:
        logging.debug(f"Ignoring unknown arguments: {unknown}")

    try:
        if not args.image:
            raise InvalidArgument("No filename provided!")

        config = ConversionConfig.resolve(
            max_res=parse_number(args.max_res, int, "max_res should be an integer value"),
            adjustment=parse_number(args.adjustment, float, "Adjustment should be a double value"),
            chars=args.chars,
            invert=args.invert,
            selection=args.selection,
            font_path=args.font_path,
            font_size=parse_number(args.font_size, int, "font_size should be an integer value"),
        )
        image = ImageLoader().read_image(args.image)
        lines = ImageConverter(config).convert(image)
        write_ascii(lines, args.output)
    except (AsciiArtError, OSError) as e:
        logging.error(f"{e}")
        return 1

    logging.info(f"Wrote {len(lines)} lines to {args.output}")
    return 0


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
