"""
Live/pristine texture storage.

Every texture-bearing directory may hold a reserved backup folder with the
pristine originals of its files, keyed by file name:

    textures/hero.png               <- live tier (may already be optimized)
    textures/_originals/hero.png    <- pristine tier

Once a pristine copy exists it is always the source for optimization, so
repeated runs never recompress an already-compressed file.
"""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

BACKUP_DIR_NAME = "_originals"


@dataclass(frozen=True)
class SourcePlan:
    """Where one texture is read from and written to"""
    live_path: Path            # the file's location in the input tree
    source: Path               # file handed to the optimizer
    destination: Path          # where the optimized file is written
    backup_path: Optional[Path] = None
    needs_backup: bool = False  # copy live_path -> backup_path before optimizing
    is_reoptimization: bool = False
    backup_only: bool = False   # no live file, restored from the pristine tier


def backup_path_for(live_path: Path) -> Path:
    return live_path.parent / BACKUP_DIR_NAME / live_path.name


def live_path_for(backup_path: Path) -> Path:
    return backup_path.parent.parent / backup_path.name


def is_in_backup_dir(path: Path) -> bool:
    return any(part == BACKUP_DIR_NAME for part in path.parts)


class TextureStore:
    """Applies the source/destination rules for one batch run

    In-place mode (output_dir is None):
        no backup      -> back up the live file first, optimize from the backup
                          back onto the live path
        backup exists  -> optimize from the backup onto the live path
    Output directory mode:
        backup exists  -> optimize from the backup into the mirrored output path
        no backup      -> optimize from the live file into the mirrored output path
    """

    def __init__(self, base_path: Path, output_dir: Optional[Path] = None):
        self.base_path = Path(base_path)
        self.output_dir = Path(output_dir) if output_dir is not None else None

    @property
    def in_place(self) -> bool:
        return self.output_dir is None

    def _destination_for(self, live_path: Path) -> Path:
        if self.in_place:
            return live_path
        return self.output_dir / live_path.relative_to(self.base_path)

    def plan_live_file(self, live_path: Path) -> SourcePlan:
        """Plan a texture discovered in the live tier"""
        live_path = Path(live_path)
        backup = backup_path_for(live_path)
        has_backup = backup.is_file()

        if self.in_place and not has_backup:
            # First run: the backup becomes the source once it is created
            return SourcePlan(
                live_path=live_path,
                source=backup,
                destination=live_path,
                backup_path=backup,
                needs_backup=True,
            )

        return SourcePlan(
            live_path=live_path,
            source=backup if has_backup else live_path,
            destination=self._destination_for(live_path),
            backup_path=backup if has_backup else None,
            is_reoptimization=has_backup,
        )

    def plan_backup_only(self, backup_path: Path) -> SourcePlan:
        """Plan a pristine file whose live counterpart is missing"""
        backup_path = Path(backup_path)
        live_path = live_path_for(backup_path)
        return SourcePlan(
            live_path=live_path,
            source=backup_path,
            destination=self._destination_for(live_path),
            backup_path=backup_path,
            is_reoptimization=True,
            backup_only=True,
        )


def create_backup(plan: SourcePlan) -> None:
    """Copy the live file verbatim into the backup folder

    The copy is written to a temporary sibling and renamed into place; an
    interrupted copy never leaves a partial file at backup_path.
    """
    backup_dir = plan.backup_path.parent
    backup_dir.mkdir(parents=True, exist_ok=True)
    temp_path = backup_dir / f"{plan.backup_path.name}.tmp"

    try:
        shutil.copy2(plan.live_path, temp_path)
        os.replace(temp_path, plan.backup_path)
    except OSError:
        temp_path.unlink(missing_ok=True)
        raise
