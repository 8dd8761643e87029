#ascii_constants.py - defaults for image -> ascii conversion.

ASCII_MAX_RES = 100          # bound applied to both width and height, in cells
ASCII_ADJUSTMENT = 17.0 / 8.0  # glyph cell height / width
ASCII_INVERT = False
ASCII_OUTPUT_FILE = "ascii.txt"

# "nearest"      -> measure every glyph, binary search the brightness table
# "proportional" -> index straight into a ramp that is already ordered
ASCII_SELECTION = "nearest"

# --- RASTERIZATION ---
ASCII_FONT_PATH = None       # None -> Pillow's built-in font
ASCII_FONT_SIZE = 16

# --- PALETTES ---
# measured mode uses every printable char (32..126) unless -c is given
ASCII_PRINTABLE_FIRST = 32
ASCII_PRINTABLE_LAST = 126

# proportional mode ramp, dark -> light on a black background
ASCII_PALETTE_DARK = " ,.1ijts79yarcnvemCPLOTVASEHNDRG8BWM"
