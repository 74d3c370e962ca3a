import fitz
from io import BytesIO

from utils.errors import RenderError
from utils.layout import (
    CAPTION_FONT,
    CAPTION_LINE_HEIGHT,
    caption_baseline,
    caption_font_size,
)
from utils.qr_generator import to_png_bytes


def _check_caption(caption, font_size):
    if font_size < 1:
        raise RenderError(f"Caption font size too small: {font_size}")
    try:
        # Base-14 fonts are written with a single-byte Latin encoding
        caption.encode("latin-1")
    except UnicodeEncodeError as e:
        raise RenderError("Caption contains characters the PDF font cannot encode") from e


def _wrap_caption(caption, font_size, max_width):
    """
    Split the caption into lines no wider than ``max_width``.

    URLs rarely contain spaces, so lines break between characters rather
    than words. A single character wider than the page still gets its own
    line.
    """
    lines = []
    current = ""
    for ch in caption:
        candidate = current + ch
        if current and fitz.get_text_length(candidate, fontname=CAPTION_FONT, fontsize=font_size) > max_width:
            lines.append(current)
            current = ch
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


def _layout_caption(caption, font_size, baseline, page_width, page_height):
    """
    Wrap the caption and pick a baseline for each line.

    Raises RenderError when the wrapped text would run past the bottom of
    the page.
    """
    lines = _wrap_caption(caption, font_size, page_width)
    step = font_size * CAPTION_LINE_HEIGHT
    placed = [(line, baseline + i * step) for i, line in enumerate(lines)]
    if placed and placed[-1][1] > page_height:
        raise RenderError(
            f"Caption needs {len(lines)} lines at {font_size}pt and does not fit on the page"
        )
    return placed


def _insert_caption(page, placed_lines, font_size, page_width):
    """Write each line centred on the page at its baseline."""
    for line, y in placed_lines:
        text_width = fitz.get_text_length(line, fontname=CAPTION_FONT, fontsize=font_size)
        x = (page_width - text_width) / 2.0
        page.insert_text(
            (x, y),
            line,
            fontsize=font_size,
            fontname=CAPTION_FONT,
            color=(0, 0, 0),
        )


def assemble(image, width, height, caption, output=None):
    """
    Build the single-page instruction PDF.

    image:    composited raster, stretched to fill the whole page
    width:    page width in points (one point per template pixel)
    height:   page height in points
    caption:  text written under the artwork, bold and centred
    output:   writable binary stream; a BytesIO is created when omitted

    Returns the output stream, rewound when it is seekable. Identical
    arguments produce identical bytes: metadata is cleared and no random
    document id is written.

    Raises RenderError when the caption cannot be encoded, does not fit on
    the page, or PyMuPDF fails.
    """
    font_size = caption_font_size(width)
    baseline = caption_baseline(height)
    _check_caption(caption, font_size)
    placed_lines = _layout_caption(caption, font_size, baseline, width, height)

    if output is None:
        output = BytesIO()

    doc = None
    try:
        doc = fitz.open()
        page = doc.new_page(width=width, height=height)

        page.insert_image(page.rect, stream=to_png_bytes(image), keep_proportion=False)
        _insert_caption(page, placed_lines, font_size, width)

        doc.set_metadata({})
        output.write(doc.tobytes(garbage=3, deflate=True, no_new_id=True))
    except Exception as e:
        raise RenderError(f"PDF generation failed: {e}") from e
    finally:
        if doc is not None:
            doc.close()

    if output.seekable():
        output.seek(0)
    return output
