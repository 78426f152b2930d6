"""Image codec backed by Pillow: decode, aspect-preserving resize, encode."""

import io
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image

RESAMPLE = Image.Resampling.LANCZOS

# Pillow save() parameters per format. Quality is filled in at encode time.
JPEG_SAVE_PARAMS = {"optimize": True, "progressive": True}
WEBP_SAVE_PARAMS = {"method": 6}
PNG_SAVE_PARAMS = {"compress_level": 9, "optimize": True}

# Largest palette used when PNG quality is below 100
PNG_MAX_COLORS = 256

ENCODABLE_FORMATS = ("PNG", "JPEG", "WEBP")


@dataclass
class DecodedImage:
    """A decoded image and the format it was stored in"""
    image: Image.Image
    width: int
    height: int
    format: str


def fit_inside(width: int, height: int, box_width: int, box_height: int) -> Tuple[int, int]:
    """
    Largest size with the source aspect ratio that fits inside a box.

    Never enlarges: a source that already fits is returned unchanged.

    Args:
        width: Source width
        height: Source height
        box_width: Bounding box width
        box_height: Bounding box height

    Returns:
        Tuple of (width, height)
    """
    if width <= box_width and height <= box_height:
        return width, height

    scale = min(box_width / width, box_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def png_palette_colors(quality: int) -> Optional[int]:
    """
    Palette size for a PNG at the given quality.

    Quality 100 keeps full colour (None). Lower qualities quantize to a
    palette that shrinks with quality, down to 2 colours.
    """
    if quality >= 100:
        return None
    return max(2, min(PNG_MAX_COLORS, round(PNG_MAX_COLORS * quality / 100)))


class PillowCodec:
    """Decode/resize/encode service used by the texture optimizer"""

    def decode(self, data: bytes) -> DecodedImage:
        """
        Decode an encoded image buffer.

        Raises:
            OSError: If the buffer is not a recognizable image
        """
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format or ''
            img.load()
            image = img.copy()
        return DecodedImage(image=image, width=image.width, height=image.height, format=fmt)

    def resize(self, image: Image.Image, target_width: int, target_height: int) -> Image.Image:
        """Fit the image inside the target box, preserving aspect ratio and never enlarging"""
        size = fit_inside(image.width, image.height, target_width, target_height)
        if size == image.size:
            return image

        # Palette images would otherwise be resampled with NEAREST
        if image.mode == 'P' or 'transparency' in image.info:
            image = image.convert('RGBA')
        elif image.mode not in ('RGB', 'RGBA', 'L', 'LA'):
            image = image.convert('RGBA' if 'A' in image.getbands() else 'RGB')
        return image.resize(size, RESAMPLE)

    def encode(self, image: Image.Image, fmt: str, quality: int) -> bytes:
        """
        Encode an image with the compression policy for its format.

        Lossy formats (JPEG, WEBP) use quality directly. PNG is always written
        at maximum zlib compression; below quality 100 it is quantized to a
        palette first, with fewer colours at lower quality.

        Raises:
            ValueError: If fmt is not an encodable format
        """
        fmt = fmt.upper()
        if fmt == 'MPO':
            fmt = 'JPEG'
        if fmt not in ENCODABLE_FORMATS:
            raise ValueError(f"Unsupported image format: {fmt or 'unknown'}")

        buffer = io.BytesIO()
        if fmt == 'JPEG':
            if image.mode not in ('RGB', 'L', 'CMYK'):
                image = _flatten_alpha(image)
            image.save(buffer, format='JPEG', quality=quality, **JPEG_SAVE_PARAMS)
        elif fmt == 'WEBP':
            image.save(buffer, format='WEBP', quality=quality, **WEBP_SAVE_PARAMS)
        else:
            colors = png_palette_colors(quality)
            if colors is not None:
                image = _quantize(image, colors)
            image.save(buffer, format='PNG', **PNG_SAVE_PARAMS)
        return buffer.getvalue()


def _flatten_alpha(image: Image.Image) -> Image.Image:
    """Composite onto white; JPEG has no alpha channel"""
    rgba = image.convert('RGBA')
    background = Image.new('RGB', rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.getchannel('A'))
    return background


def _quantize(image: Image.Image, colors: int) -> Image.Image:
    """Reduce to an indexed palette, keeping the alpha channel"""
    has_alpha = 'A' in image.getbands() or 'transparency' in image.info
    image = image.convert('RGBA' if has_alpha else 'RGB')
    return image.quantize(colors=colors, method=Image.Quantize.FASTOCTREE, dither=Image.Dither.NONE)
