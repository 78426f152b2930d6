"""
Per-texture configuration.

Loads a texture configuration document (JSON), validates it and resolves the
effective settings for a texture by matching its filename without extension
against the configured texture names, case-insensitively.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from jsonschema import Draft202012Validator

from .base_settings import TextureSettings
from .utils import MAX_SIZE_CHOICES, texture_identity

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "texture-optimize-pro.json"

_SETTINGS_PROPERTIES = {
    "maxSize": {"type": "integer", "enum": list(MAX_SIZE_CHOICES)},
    "quality": {"type": "integer", "minimum": 1, "maximum": 100},
}

CONFIG_SCHEMA = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["defaultSettings", "textures"],
    "properties": {
        "defaultSettings": {
            "type": "object",
            "required": ["maxSize", "quality"],
            "properties": _SETTINGS_PROPERTIES,
        },
        "textures": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "useDefault"],
                "properties": {
                    "name": {"type": "string", "minLength": 1},
                    "useDefault": {"type": "boolean"},
                    **_SETTINGS_PROPERTIES,
                },
            },
        },
    },
}

SAMPLE_CONFIG = {
    "defaultSettings": {
        "maxSize": 512,
        "quality": 80
    },
    "textures": [
        {"name": "player-sprite", "useDefault": False, "maxSize": 512, "quality": 85},
        {"name": "enemy-goblin", "useDefault": False, "maxSize": 256, "quality": 80},
        {"name": "background-clouds", "useDefault": True},
        {"name": "ui-button", "useDefault": False, "maxSize": 256, "quality": 90},
    ]
}


class ConfigError(Exception):
    """Texture configuration document is missing, unparseable or invalid"""


@dataclass(frozen=True)
class TextureEntry:
    """A named texture override. Unset fields fall back to the defaults."""
    name: str
    use_default: bool
    max_size: Optional[int] = None
    quality: Optional[int] = None

    @property
    def key(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class TextureConfig:
    """Root configuration document"""
    default_settings: TextureSettings
    textures: Sequence[TextureEntry] = ()

    @classmethod
    def from_dict(cls, data: dict) -> "TextureConfig":
        """Build a config from an already validated document"""
        defaults = data['defaultSettings']
        return cls(
            default_settings=TextureSettings(
                max_size=int(defaults['maxSize']),
                quality=int(defaults['quality']),
            ),
            textures=tuple(
                TextureEntry(
                    name=entry['name'],
                    use_default=entry['useDefault'],
                    max_size=_optional_int(entry.get('maxSize')),
                    quality=_optional_int(entry.get('quality')),
                )
                for entry in data['textures']
            ),
        )


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def merge_settings(entry: TextureEntry, defaults: TextureSettings) -> TextureSettings:
    """Overlay the fields an entry sets on top of the defaults"""
    return TextureSettings(
        max_size=entry.max_size if entry.max_size is not None else defaults.max_size,
        quality=entry.quality if entry.quality is not None else defaults.quality,
    )


def validate_config_document(data) -> None:
    """
    Validate a raw configuration document against CONFIG_SCHEMA.

    Raises:
        ConfigError: Listing every violated field/constraint, and any
                     texture names that collide after lower-casing
    """
    validator = Draft202012Validator(CONFIG_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path)))

    if errors:
        details = []
        for e in errors:
            where = "/".join(map(str, e.path)) or "(root)"
            details.append(f"{where}: {e.message}")
        raise ConfigError("Invalid texture config:\n  " + "\n  ".join(details))

    seen = set()
    duplicates = []
    for entry in data['textures']:
        key = entry['name'].lower()
        if key in seen and key not in duplicates:
            duplicates.append(key)
        seen.add(key)
    if duplicates:
        raise ConfigError(f"Invalid texture config: duplicate texture names: {', '.join(duplicates)}")


class TextureConfigManager:
    """Resolves per-texture settings from a texture configuration"""

    def __init__(self, config: TextureConfig, source_path: Optional[Path] = None):
        self.config = config
        self.source_path = source_path

        # Lookup by lower-cased name; a later duplicate replaces an earlier one.
        # Documents loaded from disk are rejected before they get here.
        self.texture_map: Dict[str, TextureEntry] = {}
        for entry in config.textures:
            self.texture_map[entry.key] = entry

    @classmethod
    def load_from_file(cls, config_path: Path) -> "TextureConfigManager":
        """
        Load and validate a texture configuration document.

        Args:
            config_path: Path to the JSON document

        Returns:
            TextureConfigManager for the document

        Raises:
            ConfigError: If the file is unreadable, malformed or fails validation
        """
        config_path = Path(config_path)
        try:
            content = config_path.read_text(encoding='utf-8')
        except OSError as e:
            raise ConfigError(f"Failed to read texture config from {config_path}: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Failed to parse texture config from {config_path}: {e}") from e

        try:
            validate_config_document(data)
        except ConfigError as e:
            raise ConfigError(f"{config_path}: {e}") from None

        manager = cls(TextureConfig.from_dict(data), source_path=config_path)
        logger.debug("Loaded %d texture entries from %s", len(manager.texture_map), config_path)
        return manager

    def get_entry(self, texture_path) -> Optional[TextureEntry]:
        return self.texture_map.get(texture_identity(texture_path))

    def get_settings_for_texture(self, texture_path) -> TextureSettings:
        """
        Get settings for a texture by matching its filename.

        Example: "player-sprite.png" matches texture name "player-sprite"
        """
        entry = self.get_entry(texture_path)
        if entry is None or entry.use_default:
            return self.config.default_settings
        return merge_settings(entry, self.config.default_settings)

    def has_custom_settings(self, texture_path) -> bool:
        """True if the texture has an entry that does not opt in to the defaults"""
        entry = self.get_entry(texture_path)
        return entry is not None and not entry.use_default

    def get_configured_textures(self) -> List[str]:
        """Lower-cased names of all configured textures"""
        return list(self.texture_map.keys())

    def get_default_settings(self) -> TextureSettings:
        return self.config.default_settings


def write_sample_config(directory: Path) -> Path:
    """
    Write a sample configuration document into a directory.

    Raises:
        FileExistsError: If the document already exists
    """
    config_path = Path(directory) / DEFAULT_CONFIG_NAME
    if config_path.exists():
        raise FileExistsError(f"File already exists: {config_path}")

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(SAMPLE_CONFIG, f, indent=2)
    return config_path
