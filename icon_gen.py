"""Generate the tray/window icon (64×64 PIL Image, in-memory)."""

from datetime import date

from PIL import Image, ImageDraw, ImageFont

ICON_SIZE = 64
_BAND_COLOR = "#CC0000"


def _fit_font(draw: ImageDraw.ImageDraw, text: str, max_w: int, max_h: int,
              start: int) -> ImageFont.ImageFont:
    """Return the largest bold font (from *start* down) that fits the box."""
    font_size = start
    font = None
    while font_size > 6:
        try:
            font = ImageFont.truetype("DejaVuSans-Bold.ttf", font_size)
        except OSError:
            return ImageFont.load_default()
        bbox = draw.textbbox((0, 0), text, font=font)
        if bbox[2] - bbox[0] <= max_w and bbox[3] - bbox[1] <= max_h:
            break
        font_size -= 1
    return font


def _draw_centered(draw: ImageDraw.ImageDraw, text: str, font, box: tuple[int, int, int, int],
                   fill: str) -> None:
    # Centre the visible pixels (compensate for font metric offsets)
    left, top, right, bottom = box
    bbox = draw.textbbox((0, 0), text, font=font)
    x = left + (right - left - (bbox[2] - bbox[0])) / 2 - bbox[0]
    y = top + (bottom - top - (bbox[3] - bbox[1])) / 2 - bbox[1]
    draw.text((x, y), text, fill=fill, font=font)


def create_icon_image(today: date | None = None) -> Image.Image:
    """Return a calendar-page icon: month band on top, day of month below."""
    today = today or date.today()
    size = ICON_SIZE
    band_h = size // 4

    img = Image.new("RGBA", (size, size), "white")
    draw = ImageDraw.Draw(img)
    draw.rectangle((0, 0, size - 1, band_h), fill=_BAND_COLOR)
    draw.rectangle((0, 0, size - 1, size - 1), outline="#555555")

    month_text = today.strftime("%b").upper()
    month_font = _fit_font(draw, month_text, size - 8, band_h - 2, band_h)
    _draw_centered(draw, month_text, month_font, (0, 0, size, band_h), "white")

    day_text = str(today.day)
    day_font = _fit_font(draw, day_text, size - 8, size - band_h - 6, size)
    _draw_centered(draw, day_text, day_font, (0, band_h, size, size), "black")

    return img
