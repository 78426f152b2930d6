"""File discovery and path filtering for the texture optimizer"""

import fnmatch
from pathlib import Path
from typing import List, Optional

from .backup_store import BACKUP_DIR_NAME, is_in_backup_dir, live_path_for
from .utils import SUPPORTED_EXTENSIONS


class DiscoveryError(Exception):
    """Base path is missing or cannot be scanned"""


def _matches_any(relative_path: str, patterns: List[str]) -> bool:
    """
    Check a POSIX relative path against glob-style exclude patterns.

    Patterns can be:
    - Directory globs: "**/node_modules/**" (a leading "**/" also matches at the root)
    - File patterns: "*.tmp.png", "ui/*"
    """
    path_lower = relative_path.lower()
    for pattern in patterns:
        pattern_lower = pattern.lower()
        if fnmatch.fnmatch(path_lower, pattern_lower):
            return True
        if pattern_lower.startswith('**/') and fnmatch.fnmatch(path_lower, pattern_lower[3:]):
            return True
    return False


class FileScanner:
    """Finds texture files, keeping the live tier and the backup tier apart"""

    def __init__(self, patterns: List[str], exclude_patterns: List[str] = None,
                 skip_dirs: List[Path] = None):
        """
        Initialize file scanner.

        Args:
            patterns: Filename globs to include (e.g., ["*.png", "*.jpg"]), case-insensitive
            exclude_patterns: Relative path globs to skip (e.g., ["**/node_modules/**"])
            skip_dirs: Directories to leave out entirely (e.g., an output directory
                       nested under the input)
        """
        self.patterns = [p.lower() for p in patterns]
        self.exclude_patterns = list(exclude_patterns or [])
        self.skip_dirs = [Path(d).resolve() for d in (skip_dirs or [])]

    def _check_base(self, input_dir: Path):
        if not input_dir.exists():
            raise DiscoveryError(f"Base path not found: {input_dir}")
        if not input_dir.is_dir():
            raise DiscoveryError(f"Base path is not a directory: {input_dir}")

    def _is_candidate(self, file_path: Path, input_dir: Path, match_path: Optional[Path] = None) -> bool:
        """Pattern, extension, exclusion and skip-dir checks shared by both tiers

        Exclude patterns are tested against match_path (default: file_path).
        """
        if not file_path.is_file():
            return False

        name_lower = file_path.name.lower()
        if not name_lower.endswith(SUPPORTED_EXTENSIONS):
            return False
        if not any(fnmatch.fnmatch(name_lower, p) for p in self.patterns):
            return False

        if self.skip_dirs:
            resolved = file_path.resolve()
            if any(d == resolved or d in resolved.parents for d in self.skip_dirs):
                return False

        relative = (match_path or file_path).relative_to(input_dir).as_posix()
        return not _matches_any(relative, self.exclude_patterns)

    def _walk(self, input_dir: Path) -> List[Path]:
        try:
            return sorted(input_dir.rglob("*"))
        except OSError as e:
            raise DiscoveryError(f"Cannot scan base path {input_dir}: {e}") from e

    def find_files(self, input_dir: Path) -> List[Path]:
        """
        Find live texture files, sorted.

        Anything inside a backup folder is never returned.

        Raises:
            DiscoveryError: If input_dir is missing or not a directory
        """
        input_dir = Path(input_dir)
        self._check_base(input_dir)

        return [
            f for f in self._walk(input_dir)
            if not is_in_backup_dir(f.relative_to(input_dir)) and self._is_candidate(f, input_dir)
        ]

    def find_backup_only_files(self, input_dir: Path) -> List[Path]:
        """
        Find pristine files whose live counterpart no longer exists.

        Only direct children of a backup folder are considered; the live
        counterpart of "<dir>/_originals/<name>" is "<dir>/<name>".

        Raises:
            DiscoveryError: If input_dir is missing or not a directory
        """
        input_dir = Path(input_dir)
        self._check_base(input_dir)

        orphans = []
        for backup_dir in sorted(input_dir.rglob(BACKUP_DIR_NAME)):
            if not backup_dir.is_dir():
                continue
            # Nested backup folders are not a tier of their own
            if is_in_backup_dir(backup_dir.parent.relative_to(input_dir)):
                continue
            for f in sorted(backup_dir.iterdir()):
                live = live_path_for(f)
                if live.exists() or not self._is_candidate(f, input_dir, match_path=live):
                    continue
                orphans.append(f)
        return orphans
