"""Shared utility functions for the texture optimizer"""

from pathlib import Path
from typing import Tuple, Optional


# Allowed maxSize values in texture configuration documents
MAX_SIZE_CHOICES = (32, 64, 128, 256, 512, 1024, 2048, 4096)

# Planned dimensions never drop below this, unless maxSize itself is smaller
MIN_DIMENSION = 64

# File extension -> codec format name
FORMAT_MAP = {
    ".png": "PNG",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".webp": "WEBP",
}

SUPPORTED_EXTENSIONS = tuple(FORMAT_MAP)

# Codec format name -> friendly name used in reports
FORMAT_TO_FRIENDLY = {
    'PNG': 'png',
    'JPEG': 'jpeg',
    'MPO': 'jpeg',  # multi-picture JPEGs written by some cameras
    'WEBP': 'webp',
}


def format_size(bytes_size: int) -> str:
    """Format file size in human-readable format"""
    for unit in ['B', 'KB', 'MB', 'GB']:
        if abs(bytes_size) < 1024.0:
            return f"{bytes_size:.2f} {unit}"
        bytes_size /= 1024.0
    return f"{bytes_size:.2f} TB"


def format_time(seconds: float) -> str:
    """Format time in human-readable format"""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = int(seconds // 60)
        secs = seconds % 60
        return f"{minutes}m {secs:.1f}s"
    else:
        hours = int(seconds // 3600)
        minutes = int((seconds % 3600) // 60)
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs:.0f}s"


def normalize_format(fmt: Optional[str]) -> str:
    """
    Normalize codec format names to friendly names (e.g., JPEG -> jpeg).

    Args:
        fmt: Format string reported by the codec, or None

    Returns:
        Lower-case friendly format name, 'unknown' when fmt is empty
    """
    if not fmt:
        return 'unknown'
    return FORMAT_TO_FRIENDLY.get(fmt.upper(), fmt.lower())


def format_for_path(file_path: Path) -> Optional[str]:
    """Codec format name implied by a file extension, None if unsupported"""
    return FORMAT_MAP.get(file_path.suffix.lower())


def texture_identity(file_path) -> str:
    """
    Configuration lookup key for a texture file.

    Example: "assets/Player-Sprite.png" -> "player-sprite"
    """
    return Path(file_path).stem.lower()


def round_down_to_power_of_2(n: int) -> int:
    """Round down to nearest power of 2."""
    if n <= 0:
        return 1
    # Highest set bit
    return 1 << (int(n).bit_length() - 1)


def calculate_target_dimensions(orig_width: int, orig_height: int, max_size: int) -> Tuple[int, int]:
    """
    Plan power-of-2 target dimensions capped by max_size.

    Each side is rounded down to a power of 2. If either rounded side exceeds
    max_size, both sides are recomputed from the aspect ratio: the longer side
    becomes max_size and the shorter side is scaled and rounded down again.
    The result is clamped to [min(64, max_size), max_size].

    The planned box may exceed the original image (small sources get the 64px
    floor); the codec never enlarges, so the box is an upper bound only.

    Args:
        orig_width: Original texture width
        orig_height: Original texture height
        max_size: Largest allowed dimension (one of MAX_SIZE_CHOICES)

    Returns:
        Tuple of (target_width, target_height)

    Raises:
        ValueError: If orig_width, orig_height or max_size <= 0
    """
    if orig_width <= 0 or orig_height <= 0:
        raise ValueError(f"Invalid texture dimensions: {orig_width}x{orig_height}")
    if max_size <= 0:
        raise ValueError(f"Invalid maxSize: {max_size}")

    target_width = round_down_to_power_of_2(orig_width)
    target_height = round_down_to_power_of_2(orig_height)

    if target_width > max_size or target_height > max_size:
        aspect_ratio = orig_width / orig_height
        if orig_width > orig_height:
            target_width = max_size
            target_height = round_down_to_power_of_2(int(max_size / aspect_ratio))
        else:
            target_height = max_size
            target_width = round_down_to_power_of_2(int(max_size * aspect_ratio))

    floor = min(MIN_DIMENSION, max_size)
    target_width = max(floor, min(target_width, max_size))
    target_height = max(floor, min(target_height, max_size))

    return target_width, target_height
