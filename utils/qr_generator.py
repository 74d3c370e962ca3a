"""
QR code generation for the instruction sheet.
"""
from io import BytesIO

import qrcode
from qrcode.exceptions import DataOverflowError
from PIL import Image

from utils.errors import EncodingError
from utils.layout import QR_SIZE


def encode_qr(data, size_pixels=QR_SIZE):
    """
    Encode ``data`` as a black-on-white QR code of exactly
    ``size_pixels`` x ``size_pixels``.

    Error correction is level H so the symbol still scans after printing.
    Scaling uses nearest-neighbour, so the result holds only pure black and
    pure white pixels.

    Raises EncodingError for empty data or data beyond the symbol capacity.
    """
    if not data:
        raise EncodingError("Failed to generate QR code: no data to encode")

    qr = qrcode.QRCode(
        version=None,  # smallest version that fits
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=1,
        border=1,
    )
    try:
        qr.add_data(data)
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        raise EncodingError("Failed to generate QR code: data too long") from e

    img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    return img.resize((size_pixels, size_pixels), Image.Resampling.NEAREST)


def to_png_bytes(image):
    """Convert a PIL Image to PNG bytes for embedding in the PDF."""
    buf = BytesIO()
    image.save(buf, format="PNG")
    buf.seek(0)
    return buf.read()
