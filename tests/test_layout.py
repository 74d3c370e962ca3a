from utils.layout import (
    QR_TOP,
    caption_baseline,
    caption_font_size,
    overlay_position,
    round_half_up,
)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(208.5) == 209
    assert round_half_up(2.4999) == 2
    assert round_half_up(7) == 7


def test_overlay_is_centred_horizontally():
    assert overlay_position(1080) == (QR_TOP, 348)
    assert overlay_position(801) == (QR_TOP, 209)


def test_overlay_top_ignores_size():
    assert overlay_position(2000, size=100)[0] == QR_TOP


def test_caption_metrics():
    assert caption_font_size(1080) == 32
    assert caption_font_size(801) == 24
    assert caption_baseline(1528) == 1375
    assert caption_baseline(1000) == 900
