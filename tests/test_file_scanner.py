import pytest

from conftest import make_image
from texture_optimizer.core.backup_store import BACKUP_DIR_NAME
from texture_optimizer.core.base_settings import DEFAULT_EXCLUDE, DEFAULT_PATTERNS
from texture_optimizer.core.file_scanner import DiscoveryError, FileScanner


def _scanner(**kwargs):
    kwargs.setdefault("exclude_patterns", DEFAULT_EXCLUDE)
    return FileScanner(DEFAULT_PATTERNS, **kwargs)


def test_finds_supported_textures_sorted(tmp_path):
    make_image(tmp_path / "b.png", (8, 8))
    make_image(tmp_path / "a" / "c.JPG", (8, 8), fmt="JPEG")
    make_image(tmp_path / "d.webp", (8, 8))
    make_image(tmp_path / "anim.gif", (8, 8))
    (tmp_path / "notes.txt").write_text("x")

    found = _scanner().find_files(tmp_path)

    assert found == [tmp_path / "a" / "c.JPG", tmp_path / "b.png", tmp_path / "d.webp"]


def test_backup_folder_is_never_live(tmp_path):
    make_image(tmp_path / "icon.png", (8, 8))
    make_image(tmp_path / BACKUP_DIR_NAME / "icon.png", (8, 8))

    assert _scanner().find_files(tmp_path) == [tmp_path / "icon.png"]


def test_exclude_patterns(tmp_path):
    make_image(tmp_path / "node_modules" / "pkg" / "x.png", (8, 8))
    make_image(tmp_path / "ui" / "skip.png", (8, 8))
    make_image(tmp_path / "keep.png", (8, 8))

    found = _scanner(exclude_patterns=DEFAULT_EXCLUDE + ["ui/*"]).find_files(tmp_path)

    assert found == [tmp_path / "keep.png"]


def test_include_patterns_restrict_discovery(tmp_path):
    make_image(tmp_path / "a.png", (8, 8))
    make_image(tmp_path / "b.jpg", (8, 8))

    assert FileScanner(["*.png"]).find_files(tmp_path) == [tmp_path / "a.png"]


def test_skip_dirs_hide_nested_output(tmp_path):
    make_image(tmp_path / "a.png", (8, 8))
    make_image(tmp_path / "dist" / "a.png", (8, 8))

    found = _scanner(skip_dirs=[tmp_path / "dist"]).find_files(tmp_path)

    assert found == [tmp_path / "a.png"]


def test_backup_only_files(tmp_path):
    make_image(tmp_path / "kept.png", (8, 8))
    make_image(tmp_path / BACKUP_DIR_NAME / "kept.png", (8, 8))
    orphan = make_image(tmp_path / "sub" / BACKUP_DIR_NAME / "lost.png", (8, 8))

    assert _scanner().find_backup_only_files(tmp_path) == [orphan]


def test_backup_only_respects_exclusions_on_live_path(tmp_path):
    make_image(tmp_path / "ui" / BACKUP_DIR_NAME / "lost.png", (8, 8))

    found = _scanner(exclude_patterns=["ui/*"]).find_backup_only_files(tmp_path)

    assert found == []


def test_missing_base_path(tmp_path):
    with pytest.raises(DiscoveryError, match="not found"):
        _scanner().find_files(tmp_path / "missing")


def test_base_path_must_be_directory(tmp_path):
    target = make_image(tmp_path / "a.png", (8, 8))
    with pytest.raises(DiscoveryError, match="not a directory"):
        _scanner().find_backup_only_files(target)
