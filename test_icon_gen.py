"""Tests for the Pillow-drawn calendar icon."""

from datetime import date

from icon_gen import ICON_SIZE, create_icon_image


def test_icon_size_and_mode():
    img = create_icon_image(date(2024, 3, 15))
    assert img.size == (ICON_SIZE, ICON_SIZE)
    assert img.mode == "RGBA"


def test_month_band_and_day_number():
    img = create_icon_image(date(2024, 3, 15))
    assert img.getpixel((2, 2)) == (204, 0, 0, 255)
    # Day number is drawn in black below the band
    body = img.crop((4, ICON_SIZE // 4 + 2, ICON_SIZE - 4, ICON_SIZE - 4)).convert("L")
    assert min(body.getdata()) < 64
