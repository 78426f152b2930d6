"""
Batch texture optimization.

Scans a directory tree for textures, resolves per-texture settings from the
texture configuration, decides where each texture is read from and written to
(see backup_store) and runs the single-texture optimizer over the file set in
fixed-size chunks.
"""

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .backup_store import SourcePlan, TextureStore
from .base_settings import BatchOptions, OptimizationResult
from .file_scanner import FileScanner
from .optimizer import optimize_file_worker, worker_failed_result
from .texture_config import TextureConfigManager
from .utils import format_size

logger = logging.getLogger(__name__)


@dataclass
class FormatStats:
    count: int = 0
    bytes: int = 0


@dataclass
class BatchSummary:
    """Aggregate statistics for a batch run"""
    total: int = 0
    successful: int = 0
    failed: int = 0
    custom_settings: int = 0
    default_settings: int = 0
    reoptimized: int = 0
    restored: int = 0
    original_bytes: int = 0
    optimized_bytes: int = 0
    average_processing_time: float = 0.0  # seconds
    format_breakdown: Dict[str, FormatStats] = field(default_factory=dict)
    max_size_distribution: Dict[int, int] = field(default_factory=dict)

    @property
    def saved_bytes(self) -> int:
        return self.original_bytes - self.optimized_bytes

    @property
    def reduction_percent(self) -> float:
        if self.original_bytes <= 0:
            return 0.0
        return self.saved_bytes / self.original_bytes * 100


@dataclass
class BatchRun:
    """Results in discovery order plus their summary"""
    results: List[OptimizationResult]
    summary: BatchSummary


def summarize_results(results: List[OptimizationResult]) -> BatchSummary:
    """Compute aggregate statistics. Size and time figures cover successful files only."""
    successful = [r for r in results if r.success]

    summary = BatchSummary(
        total=len(results),
        successful=len(successful),
        failed=len(results) - len(successful),
        custom_settings=sum(1 for r in successful if r.has_custom_settings),
        reoptimized=sum(1 for r in successful if r.is_reoptimization),
        restored=sum(1 for r in successful if r.is_restored),
        original_bytes=sum(r.original_size.bytes for r in successful),
        optimized_bytes=sum(r.optimized_size.bytes for r in successful),
    )
    summary.default_settings = summary.successful - summary.custom_settings

    if successful:
        summary.average_processing_time = sum(r.processing_time for r in successful) / len(successful)

    for r in successful:
        stats = summary.format_breakdown.setdefault(r.format, FormatStats())
        stats.count += 1
        stats.bytes += r.optimized_size.bytes

    distribution: Dict[int, int] = {}
    for r in successful:
        distribution[r.settings.max_size] = distribution.get(r.settings.max_size, 0) + 1
    summary.max_size_distribution = dict(sorted(distribution.items()))

    return summary


class BatchProcessor:
    """Runs texture optimization over a directory tree"""

    def __init__(self, options: BatchOptions):
        self.options = options
        self.config_manager: Optional[TextureConfigManager] = None
        self.store = TextureStore(options.base_path, options.output_dir)

        skip_dirs = []
        if options.output_dir is not None:
            skip_dirs.append(options.output_dir)
        self.scanner = FileScanner(
            patterns=options.patterns,
            exclude_patterns=options.exclude,
            skip_dirs=skip_dirs,
        )

    def find_textures(self) -> List[SourcePlan]:
        """
        Discover textures and plan their source and destination.

        With restore_backup_only, pristine files without a live counterpart
        are planned as well. Plans are sorted by their live location, which is
        the order results are reported in.

        Raises:
            DiscoveryError: If the base path is missing or unreadable
        """
        base_path = self.options.base_path
        plans = [self.store.plan_live_file(f) for f in self.scanner.find_files(base_path)]

        if self.options.restore_backup_only:
            orphans = self.scanner.find_backup_only_files(base_path)
            if orphans:
                logger.info("Found %d backed-up textures without a live file", len(orphans))
            plans.extend(self.store.plan_backup_only(f) for f in orphans)

        plans.sort(key=lambda p: p.live_path)
        return plans

    def process_all(self,
                    progress_callback: Optional[Callable[[int, int, OptimizationResult], None]] = None
                    ) -> BatchRun:
        """
        Load the configuration, discover textures and optimize them all.

        Raises:
            ConfigError: If the texture configuration cannot be loaded
            DiscoveryError: If the base path is missing or unreadable
        """
        logger.debug("Batch options: %s", self.options.to_dict())
        logger.info("Loading texture configuration from: %s", self.options.config_path)
        self.config_manager = TextureConfigManager.load_from_file(self.options.config_path)
        logger.info("  Found %d configured textures in config",
                    len(self.config_manager.get_configured_textures()))

        plans = self.find_textures()
        mode = "in-place" if self.options.in_place else f"output to {self.options.output_dir}"
        logger.info("Found %d texture files to process (%s)", len(plans), mode)

        results = self.process_plans(plans, progress_callback)
        return BatchRun(results=results, summary=summarize_results(results))

    def process_plans(self, plans: List[SourcePlan],
                      progress_callback: Optional[Callable[[int, int, OptimizationResult], None]] = None
                      ) -> List[OptimizationResult]:
        """Optimize planned textures in chunks of `concurrency` files"""
        if not plans:
            return []
        if self.config_manager is None:
            raise RuntimeError("Texture configuration must be loaded before processing.")

        jobs = [
            (plan,
             self.config_manager.get_settings_for_texture(plan.live_path),
             self.config_manager.has_custom_settings(plan.live_path))
            for plan in plans
        ]

        total = len(jobs)
        chunk_size = self.options.concurrency
        results: List[Optional[OptimizationResult]] = [None] * total
        completed = 0

        use_parallel = self.options.enable_parallel and total > 1

        if use_parallel:
            with ProcessPoolExecutor(max_workers=min(chunk_size, total)) as executor:
                # Drain each chunk before submitting the next
                for chunk_start in range(0, total, chunk_size):
                    chunk_end = min(chunk_start + chunk_size, total)

                    futures = {}
                    for index in range(chunk_start, chunk_end):
                        future = executor.submit(optimize_file_worker, jobs[index])
                        futures[future] = index

                    for future in as_completed(futures):
                        index = futures[future]
                        try:
                            result = future.result()
                        except Exception as e:
                            result = worker_failed_result(jobs[index], e)
                        results[index] = result
                        completed += 1
                        self._log_result(result)
                        if progress_callback:
                            progress_callback(completed, total, result)

                    self._log_progress(chunk_end, total)
        else:
            for chunk_start in range(0, total, chunk_size):
                chunk_end = min(chunk_start + chunk_size, total)
                for index in range(chunk_start, chunk_end):
                    result = optimize_file_worker(jobs[index])
                    results[index] = result
                    completed += 1
                    self._log_result(result)
                    if progress_callback:
                        progress_callback(completed, total, result)
                self._log_progress(chunk_end, total)

        return results

    def _log_progress(self, done: int, total: int):
        level = logging.INFO if self.options.verbose else logging.DEBUG
        logger.log(level, "Progress: %d/%d", done, total)

    def _log_result(self, result: OptimizationResult):
        name = result.input_path.name
        if not result.success:
            logger.warning("✗ %s - %s", name, result.error)
            return

        config_type = "[CUSTOM]" if result.has_custom_settings else "[DEFAULT]"
        reopt = " [RE-OPTIMIZED]" if result.is_reoptimization else ""
        restored = " [RESTORED]" if result.is_restored else ""
        logger.info(
            "✓ %s%s%s %s → %s (%.1f%% smaller, saved %s, %s, %dx%d, maxSize: %dpx)",
            config_type, reopt, restored, name, result.output_path,
            result.reduction_percent, format_size(result.saved_bytes), format_size(result.optimized_size.bytes),
            result.optimized_size.width, result.optimized_size.height, result.settings.max_size,
        )
