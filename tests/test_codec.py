import io

import pytest
from PIL import Image

from texture_optimizer.core.codec import PillowCodec, fit_inside, png_palette_colors


def _encoded(image, fmt):
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.mark.parametrize("source, box, expected", [
    ((900, 600), (512, 512), (512, 341)),
    ((2000, 1000), (512, 256), (512, 256)),
    ((600, 2000), (64, 256), (64, 213)),
    ((40, 40), (64, 64), (40, 40)),  # never enlarged
    ((64, 30), (64, 64), (64, 30)),
])
def test_fit_inside(source, box, expected):
    assert fit_inside(*source, *box) == expected


def test_png_palette_shrinks_with_quality():
    assert png_palette_colors(100) is None
    assert png_palette_colors(80) == 205
    assert png_palette_colors(10) == 26
    assert png_palette_colors(1) == 3


def test_lower_png_quality_never_grows_the_file():
    gradient = Image.linear_gradient("L").resize((512, 512)).convert("RGB")
    codec = PillowCodec()
    assert len(codec.encode(gradient, "PNG", 10)) <= len(codec.encode(gradient, "PNG", 100))


def test_png_quantize_keeps_alpha():
    image = Image.new("RGBA", (64, 64), (255, 0, 0, 0))
    image.paste((0, 0, 255, 255), (0, 0, 32, 64))
    data = PillowCodec().encode(image, "PNG", 50)
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "P"
        rgba = img.convert("RGBA")
    assert rgba.getpixel((0, 0))[3] == 255
    assert rgba.getpixel((0, 0))[2] > 200
    assert rgba.getpixel((63, 0))[3] == 0


def test_png_full_quality_stays_true_colour():
    data = PillowCodec().encode(Image.new("RGB", (16, 16), (1, 2, 3)), "PNG", 100)
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGB"


def test_decode_reports_dimensions_and_format():
    decoded = PillowCodec().decode(_encoded(Image.new("RGB", (300, 200)), "PNG"))
    assert (decoded.width, decoded.height, decoded.format) == (300, 200, "PNG")


def test_decode_rejects_garbage():
    with pytest.raises(OSError):
        PillowCodec().decode(b"definitely not an image")


def test_resize_expands_palette_images():
    palette = Image.new("RGB", (256, 256), (10, 200, 30)).convert("P")
    resized = PillowCodec().resize(palette, 64, 64)
    assert resized.size == (64, 64)
    assert resized.mode == "RGBA"


def test_resize_returns_small_images_untouched():
    image = Image.new("RGB", (32, 32))
    assert PillowCodec().resize(image, 64, 64) is image


@pytest.mark.parametrize("fmt", ["PNG", "JPEG", "WEBP"])
def test_encode_keeps_format(fmt):
    data = PillowCodec().encode(Image.new("RGB", (128, 64), (90, 90, 200)), fmt, 75)
    with Image.open(io.BytesIO(data)) as img:
        assert img.format == fmt
        assert img.size == (128, 64)


def test_jpeg_encode_flattens_alpha():
    data = PillowCodec().encode(Image.new("RGBA", (64, 64), (255, 0, 0, 128)), "JPEG", 80)
    with Image.open(io.BytesIO(data)) as img:
        assert img.mode == "RGB"


def test_encode_rejects_unsupported_format():
    with pytest.raises(ValueError, match="Unsupported image format: GIF"):
        PillowCodec().encode(Image.new("RGB", (8, 8)), "GIF", 80)
