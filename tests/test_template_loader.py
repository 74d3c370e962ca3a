import os

import pytest
from PIL import Image

from utils.config import DEFAULT_TEMPLATE_PATH
from utils.errors import AssetError
from utils.layout import QR_SIZE, QR_TOP
from utils.template_loader import TemplateLoader, load_template

from conftest import TEMPLATE_HEIGHT, TEMPLATE_WIDTH


def test_load_reports_dimensions(template_path):
    template = load_template(template_path)
    assert (template.width, template.height) == (TEMPLATE_WIDTH, TEMPLATE_HEIGHT)
    assert template.image.size == (TEMPLATE_WIDTH, TEMPLATE_HEIGHT)
    assert template.image.mode == "RGB"


def test_palette_template_is_converted_to_rgb(tmp_path):
    path = tmp_path / "palette.png"
    Image.new("RGB", (500, 900), (10, 20, 30)).convert("P").save(path)
    assert load_template(str(path)).image.mode == "RGB"


def test_transparent_template_keeps_alpha(tmp_path):
    path = tmp_path / "alpha.png"
    Image.new("LA", (500, 900), (200, 128)).save(path)
    assert load_template(str(path)).image.mode == "RGBA"


def test_missing_template_raises_asset_error(tmp_path):
    with pytest.raises(AssetError) as info:
        load_template(str(tmp_path / "nope.png"))
    assert "not found" in str(info.value)


def test_undecodable_template_raises_asset_error(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"definitely not an image")
    with pytest.raises(AssetError) as info:
        load_template(str(path))
    assert info.value.__cause__ is not None


def test_oversized_template_raises_asset_error(template_path, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    with pytest.raises(AssetError) as info:
        load_template(template_path)
    assert isinstance(info.value.__cause__, Image.DecompressionBombError)


def test_directory_is_not_a_template(tmp_path):
    with pytest.raises(AssetError):
        load_template(str(tmp_path))


def test_loader_reads_every_time_without_cache(template_path):
    loader = TemplateLoader(template_path)
    first = loader.load()
    assert loader.load() is not first
    os.remove(template_path)
    with pytest.raises(AssetError):
        loader.load()


def test_loader_cache_reads_once(template_path):
    loader = TemplateLoader(template_path, cache=True)
    first = loader.load()
    os.remove(template_path)
    assert loader.load() is first


def test_loader_cache_does_not_keep_failures(tmp_path):
    path = tmp_path / "late.png"
    loader = TemplateLoader(str(path), cache=True)
    with pytest.raises(AssetError):
        loader.load()
    Image.new("RGB", (500, 900)).save(path)
    assert loader.load().width == 500


def test_bundled_template_fits_the_overlay():
    template = load_template(DEFAULT_TEMPLATE_PATH)
    assert template.width > QR_SIZE
    assert template.height >= QR_TOP + QR_SIZE
