"""Settings and result value objects shared across the texture optimizer"""

from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import List, Optional, Tuple


DEFAULT_PATTERNS = ["*.png", "*.jpg", "*.jpeg", "*.webp"]
DEFAULT_EXCLUDE = ["**/node_modules/**"]


@dataclass(frozen=True)
class TextureSettings:
    """Fully resolved settings applied to one texture"""
    max_size: int
    quality: int

    def to_dict(self) -> dict:
        return {'maxSize': self.max_size, 'quality': self.quality}


@dataclass(frozen=True)
class ImageSize:
    """Pixel dimensions plus encoded byte count"""
    width: int = 0
    height: int = 0
    bytes: int = 0

    @property
    def dims(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class OptimizationResult:
    """Result from optimizing a single texture"""
    success: bool
    input_path: Path
    settings: TextureSettings
    output_path: Optional[Path] = None
    original_size: ImageSize = ImageSize()
    optimized_size: ImageSize = ImageSize()
    target_size: Tuple[int, int] = (0, 0)  # planned (width, height) box
    reduction_percent: float = 0.0
    processing_time: float = 0.0  # seconds
    format: str = 'unknown'
    error: Optional[str] = None
    # Tagged by the batch processor
    is_reoptimization: bool = False
    has_custom_settings: bool = False
    is_restored: bool = False  # written to a live path that was missing
    backup_path: Optional[Path] = None

    @property
    def saved_bytes(self) -> int:
        return self.original_size.bytes - self.optimized_size.bytes


@dataclass
class BatchOptions:
    """Configuration for a batch run

    Leaving output_dir unset selects in-place mode: optimized files overwrite
    the originals, which are preserved in the reserved backup folder.
    """

    base_path: Path
    config_path: Path
    output_dir: Optional[Path] = None

    # File discovery
    patterns: List[str] = field(default_factory=lambda: list(DEFAULT_PATTERNS))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    restore_backup_only: bool = True

    # Performance settings
    concurrency: int = 10
    enable_parallel: bool = True

    verbose: bool = False

    def __post_init__(self):
        self.base_path = Path(self.base_path)
        self.config_path = Path(self.config_path)
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir)
        if self.concurrency < 1:
            raise ValueError(f"Concurrency must be a positive integer, got {self.concurrency}")

    @property
    def in_place(self) -> bool:
        return self.output_dir is None

    def to_dict(self) -> dict:
        """Convert options to a plain dictionary for logging"""
        data = asdict(self)
        for key in ('base_path', 'config_path', 'output_dir'):
            if data[key] is not None:
                data[key] = str(data[key])
        return data
