"""
Single texture optimization.

Reads a source image, plans power-of-2 target dimensions from its settings,
resizes (never enlarging) and recompresses it in its original format, then
writes the result to the destination.
"""

import time
from dataclasses import replace
from pathlib import Path
from typing import Optional

from .backup_store import SourcePlan, create_backup
from .base_settings import ImageSize, OptimizationResult, TextureSettings
from .codec import PillowCodec
from .utils import calculate_target_dimensions, format_for_path, normalize_format


class TextureOptimizer:
    """Optimizes single textures with one set of resolved settings"""

    def __init__(self, settings: TextureSettings, codec: Optional[PillowCodec] = None):
        self.settings = settings
        self.codec = codec or PillowCodec()

    def optimize(self, input_path: Path, output_path: Path) -> OptimizationResult:
        """
        Optimize one texture.

        Never raises for per-file problems: any failure is reported as a
        result with success=False, zeroed sizes and an error message.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        start_time = time.perf_counter()

        try:
            # === STEP 1: Read and measure ===
            original_bytes = input_path.read_bytes()
            decoded = self.codec.decode(original_bytes)
            fmt = decoded.format or format_for_path(input_path) or ''

            # === STEP 2: Plan and resize ===
            target = calculate_target_dimensions(decoded.width, decoded.height, self.settings.max_size)
            resized = self.codec.resize(decoded.image, *target)

            # === STEP 3: Compress in the source format ===
            output_bytes = self.codec.encode(resized, fmt, self.settings.quality)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(output_bytes)

        except Exception as e:
            return self.failed_result(input_path, f"{type(e).__name__}: {e}", start_time)

        reduction = 0.0
        if original_bytes:
            reduction = (len(original_bytes) - len(output_bytes)) / len(original_bytes) * 100

        return OptimizationResult(
            success=True,
            input_path=input_path,
            output_path=output_path,
            settings=self.settings,
            original_size=ImageSize(decoded.width, decoded.height, len(original_bytes)),
            optimized_size=ImageSize(resized.width, resized.height, len(output_bytes)),
            target_size=target,
            reduction_percent=reduction,
            processing_time=time.perf_counter() - start_time,
            format=normalize_format(fmt),
        )

    def failed_result(self, input_path: Path, error: str, start_time: float) -> OptimizationResult:
        return OptimizationResult(
            success=False,
            input_path=input_path,
            settings=self.settings,
            processing_time=time.perf_counter() - start_time,
            error=error,
        )


def optimize_file_worker(args) -> OptimizationResult:
    """
    Worker function for parallel processing.

    Creates the backup first when the plan asks for one, then optimizes from
    the plan's source and tags the result for reporting.
    """
    plan, settings, has_custom = args
    optimizer = TextureOptimizer(settings)

    if plan.needs_backup:
        try:
            create_backup(plan)
        except OSError as e:
            result = optimizer.failed_result(plan.live_path, f"Backup failed: {e}", time.perf_counter())
            return replace(result, has_custom_settings=has_custom)

    result = optimizer.optimize(plan.source, plan.destination)
    return tag_result(result, plan, has_custom)


def tag_result(result: OptimizationResult, plan: SourcePlan, has_custom: bool) -> OptimizationResult:
    return replace(
        result,
        is_reoptimization=plan.is_reoptimization,
        has_custom_settings=has_custom,
        is_restored=plan.backup_only,
        backup_path=plan.backup_path,
    )


def worker_failed_result(args, error: BaseException) -> OptimizationResult:
    """Failed result for a job whose worker process died or raised"""
    plan, settings, has_custom = args
    result = TextureOptimizer(settings).failed_result(plan.source, f"Worker failed: {error}", time.perf_counter())
    return tag_result(result, plan, has_custom)
