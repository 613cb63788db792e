# pagemapper/config.py
from PySide6.QtCore import QSizeF

# Editor object types, by the "type" key of the scene JSON
TEXT_TYPES = ("text", "i-text", "textbox")
IMAGE_TYPES = ("image",)

CENTER = "center"

# Text defaults applied when the editor omits a field
DEFAULT_FONT_SIZE = 24.0
DEFAULT_LINE_HEIGHT = 1.16
DEFAULT_FONT_FAMILY = "Helvetica"

# Baseline fallback when a font exposes no ascent/descent
FALLBACK_ASCENT_RATIO = 0.8

# Underline geometry, as fractions of the font size
UNDERLINE_OFFSET_RATIO = 0.08
UNDERLINE_THICKNESS_RATIO = 0.05

# Output page
PDF_RESOLUTION = 72  # 1 unit = 1pt
PAGE_SIZES = {
    "a4":     QSizeF(595.28, 841.89),
    "letter": QSizeF(612.0, 792.0),
    "legal":  QSizeF(612.0, 1008.0),
}
DEFAULT_PAGE_SIZE = "a4"

ERROR_POLICIES = ("skip", "abort")
