import json
from pathlib import Path

import pytest
from PIL import Image


HERO_CONFIG = {
    "defaultSettings": {"maxSize": 512, "quality": 80},
    "textures": [
        {"name": "hero", "useDefault": False, "maxSize": 1024, "quality": 90},
    ],
}


def make_image(path: Path, size, fmt: str = None, mode: str = "RGB", color=(200, 60, 30)) -> Path:
    """Write a test image with a simple gradient so encoders have something to do"""
    path.parent.mkdir(parents=True, exist_ok=True)
    width, height = size
    image = Image.new(mode, size, color if mode != "RGBA" else color + (255,))
    if mode in ("RGB", "RGBA") and width > 1:
        shade = Image.linear_gradient("L").resize((width // 2, height))
        image.paste(shade.convert(mode), (0, 0), shade)
    image.save(path, format=fmt)
    return path


def write_config(path: Path, data: dict) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def config_path(tmp_path):
    return write_config(tmp_path / "texture-optimize-pro.json", HERO_CONFIG)


@pytest.fixture
def texture_tree(tmp_path):
    """base/hero.png (900x600), base/sub/bg.jpg (2000x1000)"""
    base = tmp_path / "textures"
    make_image(base / "hero.png", (900, 600))
    make_image(base / "sub" / "bg.jpg", (2000, 1000))
    return base


def image_size(path: Path):
    with Image.open(path) as img:
        return img.size


def image_format(path: Path):
    with Image.open(path) as img:
        return img.format
