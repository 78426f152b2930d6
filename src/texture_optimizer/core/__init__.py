"""Core texture optimization: configuration, sizing policy, pipeline and batch runs"""

from .base_settings import TextureSettings, ImageSize, OptimizationResult, BatchOptions
from .texture_config import (
    ConfigError,
    TextureEntry,
    TextureConfig,
    TextureConfigManager,
    merge_settings,
    write_sample_config,
)
from .utils import (
    format_size,
    format_time,
    normalize_format,
    texture_identity,
    round_down_to_power_of_2,
    calculate_target_dimensions,
    MAX_SIZE_CHOICES,
    SUPPORTED_EXTENSIONS,
)
from .codec import PillowCodec, DecodedImage
from .optimizer import TextureOptimizer
from .backup_store import BACKUP_DIR_NAME, SourcePlan, TextureStore
from .file_scanner import FileScanner, DiscoveryError
from .batch_processor import BatchProcessor, BatchRun, BatchSummary, summarize_results

__all__ = [
    # Settings and results
    'TextureSettings',
    'ImageSize',
    'OptimizationResult',
    'BatchOptions',
    # Configuration
    'ConfigError',
    'TextureEntry',
    'TextureConfig',
    'TextureConfigManager',
    'merge_settings',
    'write_sample_config',
    # Formatting utilities
    'format_size',
    'format_time',
    'normalize_format',
    # Sizing policy
    'texture_identity',
    'round_down_to_power_of_2',
    'calculate_target_dimensions',
    'MAX_SIZE_CHOICES',
    'SUPPORTED_EXTENSIONS',
    # Codec and pipeline
    'PillowCodec',
    'DecodedImage',
    'TextureOptimizer',
    # Live/backup storage and discovery
    'BACKUP_DIR_NAME',
    'SourcePlan',
    'TextureStore',
    'FileScanner',
    'DiscoveryError',
    # Batch runs
    'BatchProcessor',
    'BatchRun',
    'BatchSummary',
    'summarize_results',
]
