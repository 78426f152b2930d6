"""Texture Optimizer - command line interface."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .core.backup_store import BACKUP_DIR_NAME
from .core.base_settings import BatchOptions, DEFAULT_EXCLUDE, DEFAULT_PATTERNS
from .core.batch_processor import BatchProcessor, BatchSummary
from .core.file_scanner import DiscoveryError
from .core.texture_config import DEFAULT_CONFIG_NAME, ConfigError, write_sample_config
from .core.utils import MAX_SIZE_CHOICES, format_size, format_time

logger = logging.getLogger(__name__)

EPILOG = """
Examples:
  # Create a sample configuration in the current directory:
  texture-optimizer init

  # Optimize into a separate output tree:
  texture-optimizer build -c texture-optimize-pro.json -b src/assets/textures -o dist/textures

  # Optimize in place (originals are kept in each folder's _originals/):
  texture-optimizer build -b src/assets/textures
"""


def print_summary(summary: BatchSummary):
    """Print the processing summary"""
    print("\n" + "=" * 50)
    print("Processing Summary")
    print("=" * 50)

    print(f"✓ Successful: {summary.successful}/{summary.total}")
    print(f"⚙ Custom settings applied: {summary.custom_settings}")
    print(f"📋 Default settings used: {summary.default_settings}")
    if summary.reoptimized:
        print(f"♻ Re-optimized from backups: {summary.reoptimized}")
    if summary.restored:
        print(f"↺ Restored from {BACKUP_DIR_NAME}/: {summary.restored}")
    if summary.failed:
        print(f"✗ Failed: {summary.failed}")

    print("\n=== Size Statistics ===")
    print(f"  Original size:  {format_size(summary.original_bytes)}")
    print(f"  Optimized size: {format_size(summary.optimized_bytes)}")
    print(f"  Saved: {format_size(summary.saved_bytes)} ({summary.reduction_percent:.1f}% reduction)")
    print(f"  Avg processing time: {format_time(summary.average_processing_time)} per texture")

    if summary.format_breakdown:
        print("\n=== Format Breakdown ===")
        for fmt, stats in summary.format_breakdown.items():
            print(f"  {fmt.upper()}: {stats.count} files ({format_size(stats.bytes)})")

    if summary.max_size_distribution:
        print("\n=== MaxSize Distribution ===")
        for size, count in summary.max_size_distribution.items():
            print(f"  {size}px: {count} textures")

    print("=" * 50 + "\n")


def run_build(args) -> int:
    config_path = Path(args.config).resolve()
    base_path = Path(args.base_path).resolve()
    output_dir = Path(args.output).resolve() if args.output else None

    print(f"Config: {config_path}")
    print(f"Input:  {base_path}")
    if output_dir:
        print(f"Output: {output_dir}\n")
    else:
        print(f"Output: in place (originals kept in {BACKUP_DIR_NAME}/)\n")

    try:
        options = BatchOptions(
            base_path=base_path,
            config_path=config_path,
            output_dir=output_dir,
            patterns=args.patterns or list(DEFAULT_PATTERNS),
            exclude=list(DEFAULT_EXCLUDE) + (args.exclude or []),
            concurrency=args.concurrency,
            enable_parallel=not args.sequential,
            restore_backup_only=not args.no_restore,
            verbose=args.verbose,
        )
        run = BatchProcessor(options).process_all()
    except ConfigError as e:
        logger.error("❌ %s", e)
        if not config_path.exists():
            print(f"\nTip: Run 'texture-optimizer init' to create a sample {DEFAULT_CONFIG_NAME}")
        return 1
    except (DiscoveryError, ValueError) as e:
        logger.error("❌ %s", e)
        return 1

    print_summary(run.summary)
    return 1 if run.summary.failed else 0


def run_init(args) -> int:
    try:
        config_path = write_sample_config(Path(args.directory))
    except FileExistsError as e:
        logger.error("⚠️  %s", e)
        print("   Remove it first or use a different directory")
        return 1

    print(f"✓ Created {config_path}")
    print("\nConfiguration file structure:")
    print("  - defaultSettings: Applied to all textures without custom settings")
    print("  - textures: Array of per-texture configurations")
    print("    - name: Texture filename (without extension, case-insensitive)")
    print("    - useDefault: true = use default settings, false = use custom")
    print(f"    - maxSize: Maximum dimension ({', '.join(map(str, MAX_SIZE_CHOICES))})")
    print("    - quality: Compression quality (1-100)")
    print("\nTips:")
    print("  - Output format matches the input format (e.g., .png stays .png)")
    print('  - Example: "player-sprite.png" matches name "player-sprite"')
    print("  - Use maxSize 512 or 256 for playable ads (5MB limit)")
    print("  - Use maxSize 1024 for general web games")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="texture-optimizer",
        description="Optimize textures for HTML5 games with per-texture configuration.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Process and optimize textures")
    build.add_argument('-c', '--config', default=DEFAULT_CONFIG_NAME, metavar='FILE',
                       help=f'Texture configuration file (default: {DEFAULT_CONFIG_NAME})')
    build.add_argument('-b', '--base-path', default='src/assets/textures', metavar='DIR',
                       help='Base path for input textures')
    build.add_argument('-o', '--output', metavar='DIR',
                       help='Output directory (omit to optimize in place)')
    build.add_argument('--pattern', dest='patterns', action='append', metavar='GLOB',
                       help='Filename pattern to include (repeatable, default: png/jpg/jpeg/webp)')
    build.add_argument('--exclude', action='append', metavar='GLOB',
                       help='Relative path pattern to exclude (repeatable)')
    build.add_argument('--concurrency', type=int, default=10,
                       help='Number of textures processed at once (default: 10)')
    build.add_argument('--sequential', action='store_true',
                       help='Process in this process without a worker pool')
    build.add_argument('--no-restore', action='store_true',
                       help=f'Ignore {BACKUP_DIR_NAME}/ files whose live file is missing')
    build.add_argument('--verbose', '-v', action='store_true', help='Show detailed progress')
    build.set_defaults(func=run_build)

    init = subparsers.add_parser("init", help=f"Create a sample {DEFAULT_CONFIG_NAME}")
    init.add_argument('directory', nargs='?', default='.', help='Target directory')
    init.set_defaults(func=run_init)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if getattr(args, 'verbose', False) else logging.INFO,
        format="%(message)s",
        stream=sys.stdout,
    )
    # Pillow logs every decoded chunk at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
