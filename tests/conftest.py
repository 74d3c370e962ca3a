from io import StringIO

import fitz
import pytest
from PIL import Image

from app import create_app
from utils.config import Config
from utils.logger import build_logger

SECRET = "s3cret-value"

# Odd width so the centred offset exercises half-up rounding
TEMPLATE_WIDTH = 801
TEMPLATE_HEIGHT = 1000
TEMPLATE_COLOR = (240, 235, 220)


@pytest.fixture
def template_path(tmp_path):
    path = tmp_path / "template.png"
    Image.new("RGB", (TEMPLATE_WIDTH, TEMPLATE_HEIGHT), TEMPLATE_COLOR).save(path)
    return str(path)


@pytest.fixture
def log_streams():
    return StringIO(), StringIO()


@pytest.fixture
def logger(log_streams):
    out, err = log_streams
    return build_logger("debug", name="qr_pdf_test", stdout=out, stderr=err)


@pytest.fixture
def config(template_path):
    return Config(auth_secret=SECRET, template_path=template_path)


@pytest.fixture
def app(config, logger):
    app = create_app(config, logger)
    app.testing = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def render_page(pdf_bytes):
    """First page of a PDF rasterised at one pixel per point."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        pix = doc[0].get_pixmap(alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
    finally:
        doc.close()


def decode_qr(image):
    """
    Decode QR symbols in ``image`` with pyzbar, skipping the test when
    pyzbar or the zbar shared library is unavailable.
    """
    pyzbar = pytest.importorskip("pyzbar.pyzbar")
    try:
        results = pyzbar.decode(image)
    except ImportError as e:
        # pyzbar loads libzbar lazily, on the first decode
        pytest.skip(f"zbar shared library not available: {e}")
    return [r.data.decode("utf-8") for r in results]
