"""Generate the system-tray icon (64×64 PIL Image, in-memory)."""

from datetime import date

from PIL import Image, ImageDraw, ImageFont

_FONT_CANDIDATES = ("segoeuib.ttf", "DejaVuSans-Bold.ttf", "Arial Bold.ttf")


def _load_font(size: int):
    for name in _FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return None


def create_icon_image(day: date) -> Image.Image:
    """Return a 64×64 RGBA image showing the ISO week number of *day*."""
    size = 64
    img = Image.new("RGBA", (size, size), "white")
    draw = ImageDraw.Draw(img)
    label = str(day.isocalendar()[1])

    # Largest font size whose text box fits the icon
    font = None
    for font_size in range(120, 10, -1):
        font = _load_font(font_size)
        if font is None:
            font = ImageFont.load_default()
            break
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        if right - left <= size and bottom - top <= size:
            break

    left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
    x = (size - (right - left)) / 2 - left
    y = (size - (bottom - top)) / 2 - top
    draw.text((x, y), label, fill="black", font=font)
    return img
