"""
Fixed page geometry for the instruction sheet.

The overlay offsets are tuned to the artwork of the bundled template; a new
template needs these re-derived and checked by eye.
"""
import math

QR_SIZE = 384          # side of the QR raster in pixels
QR_TOP = 481           # distance from the top of the template to the QR

CAPTION_FONT = "hebo"  # Base-14 Helvetica-Bold
CAPTION_FONT_RATIO = 0.03
CAPTION_BASELINE_RATIO = 0.9
CAPTION_LINE_HEIGHT = 1.2

OUTPUT_FILENAME = "qr-instructions.pdf"


def round_half_up(value):
    """Round .5 away from zero for positive values (``round`` rounds to even)."""
    return int(math.floor(value + 0.5))


def overlay_position(template_width, size=QR_SIZE, top=QR_TOP):
    """(top, left) of a centred square overlay of side ``size``."""
    return top, round_half_up((template_width - size) / 2)


def caption_font_size(page_width):
    return round_half_up(page_width * CAPTION_FONT_RATIO)


def caption_baseline(page_height):
    return round_half_up(page_height * CAPTION_BASELINE_RATIO)
