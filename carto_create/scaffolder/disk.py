"""Disk utilities used while populating a project directory.

Blocking calls run through :func:`asyncio.to_thread`.  Every ``OSError`` is
re-raised as :class:`~carto_create.errors.FilesystemError` naming the path
that failed, so a failed copy aborts the whole generation.
"""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path

from carto_create.errors import FilesystemError

VCS_DIR = ".git"


async def copy(src: str | Path, dst: str | Path) -> None:
    """Copy *src* to *dst*, recursing into directories.

    Files are copied byte for byte and overwrite *dst* when it exists.
    Symbolic links are recreated as links, never followed.
    """
    src_path, dst_path = Path(src), Path(dst)
    if await asyncio.to_thread(_is_symlink, src_path):
        await asyncio.to_thread(_copy_link, src_path, dst_path)
    elif await asyncio.to_thread(_is_dir, src_path):
        await copy_dir(src_path, dst_path)
    else:
        await asyncio.to_thread(_copy_file, src_path, dst_path)


async def copy_dir(src_dir: str | Path, dst_dir: str | Path) -> None:
    """Create *dst_dir* (with parents) and copy every entry of *src_dir* into it."""
    src_path, dst_path = Path(src_dir), Path(dst_dir)
    await asyncio.to_thread(_mkdir, dst_path)
    names = await asyncio.to_thread(_list_dir, src_path)
    # Sibling entries are disjoint, so they can be copied concurrently.
    await asyncio.gather(*(copy(src_path / name, dst_path / name) for name in names))


async def make_dir(path: str | Path) -> None:
    """Create *path* and any missing parents."""
    await asyncio.to_thread(_mkdir, Path(path))


async def is_empty(path: str | Path) -> bool:
    """Return ``True`` if *path* has no entries besides a ``.git`` directory."""
    names = await asyncio.to_thread(_list_dir, Path(path))
    return len(names) == 0 or (len(names) == 1 and names[0] == VCS_DIR)


async def empty_dir(path: str | Path) -> list[Path]:
    """Remove every entry of *path* except ``.git``.

    Returns:
        The removed paths, in directory-listing order.
    """
    dir_path = Path(path)
    removed: list[Path] = []
    for name in await asyncio.to_thread(_list_dir, dir_path):
        if name == VCS_DIR:
            continue
        entry = dir_path / name
        await remove_path(entry)
        removed.append(entry)
    return removed


async def remove_path(path: str | Path) -> bool:
    """Forcefully remove a file or directory tree.

    Returns:
        ``True`` if something was removed, ``False`` if *path* was missing.
    """
    return await asyncio.to_thread(_remove, Path(path))


async def write_text(path: str | Path, content: str) -> None:
    """Write *content* to *path* as UTF-8, creating parent directories."""
    await asyncio.to_thread(_write_text, Path(path), content)


# ---------------------------------------------------------------------------
# Synchronous helpers
# ---------------------------------------------------------------------------


def _is_symlink(path: Path) -> bool:
    try:
        return path.is_symlink()
    except OSError as exc:
        raise FilesystemError(f"Cannot stat {path}: {exc}", path=path) from exc


def _is_dir(path: Path) -> bool:
    try:
        return path.is_dir()
    except OSError as exc:
        raise FilesystemError(f"Cannot stat {path}: {exc}", path=path) from exc


def _mkdir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(f"Cannot create directory {path}: {exc}", path=path) from exc


def _list_dir(path: Path) -> list[str]:
    try:
        return sorted(os.listdir(path))
    except OSError as exc:
        raise FilesystemError(f"Cannot read directory {path}: {exc}", path=path) from exc


def _copy_file(src: Path, dst: Path) -> None:
    try:
        shutil.copyfile(src, dst)
    except OSError as exc:
        raise FilesystemError(f"Cannot copy {src} to {dst}: {exc}", path=src) from exc


def _copy_link(src: Path, dst: Path) -> None:
    try:
        target = os.readlink(src)
        if dst.is_symlink() or dst.is_file():
            dst.unlink()
        elif dst.is_dir():
            shutil.rmtree(dst)
        os.symlink(target, dst, target_is_directory=src.is_dir())
    except OSError as exc:
        raise FilesystemError(f"Cannot copy link {src} to {dst}: {exc}", path=src) from exc


def _remove(path: Path) -> bool:
    try:
        if path.is_symlink() or path.is_file():
            path.unlink()
            return True
        if path.is_dir():
            shutil.rmtree(path)
            return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise FilesystemError(f"Cannot remove {path}: {exc}", path=path) from exc
    return False


def _write_text(path: Path, content: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot write {path}: {exc}", path=path) from exc
