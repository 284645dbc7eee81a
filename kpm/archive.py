# -- kpm -------------------------------------------------------- #
# kpm/archive.py on kpm                                           #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import gzip
import io
import os
import tarfile
import zlib
from typing import Iterator, List, Optional, Tuple

from .console import OperationUI, vlog
from .errors import ArchiveFormatError, SourceBuildUnsupported, UnsafeEntryPathError, WriteError
from .schema import PackageManifest
from .store import InstallManifest
from .transport import HttpFetcher

_FORMAT_ERRORS = (tarfile.ReadError, tarfile.CompressionError, gzip.BadGzipFile, zlib.error, EOFError)


# ---- Path containment ------------------------------------------- #

def _inside(root_real: str, path: str) -> bool:
    real = os.path.realpath(path)
    try:
        return os.path.commonpath([root_real, real]) == root_real
    except ValueError:  # different drives
        return False


def safe_destination(root: str, member: tarfile.TarInfo) -> str:
    """Destination of ``member`` under ``root``, refusing anything that escapes it.

    Symlinks already written by earlier members are resolved, and link
    members must point inside the root as well.
    """
    name = member.name
    if not name or os.path.isabs(name) or name.startswith(("/", "\\")) or os.path.splitdrive(name)[0]:
        raise UnsafeEntryPathError(name)
    root_real = os.path.realpath(root)
    dest = os.path.normpath(os.path.join(root, name))
    if not _inside(root_real, dest):
        raise UnsafeEntryPathError(name)

    if member.issym():
        link = member.linkname
        target = link if os.path.isabs(link) else os.path.join(os.path.dirname(dest), link)
        if not _inside(root_real, target):
            raise UnsafeEntryPathError(f"{name} -> {link}")
    elif member.islnk():
        if os.path.isabs(member.linkname) or not _inside(root_real, os.path.join(root, member.linkname)):
            raise UnsafeEntryPathError(f"{name} -> {member.linkname}")
    return dest


def _record_path(dest: str, member: tarfile.TarInfo) -> str:
    return dest + os.sep if member.isdir() else dest


# ---- Extraction ------------------------------------------------- #

def _next_member(members: Iterator[tarfile.TarInfo], attempted: List[str]) -> Optional[tarfile.TarInfo]:
    try:
        return next(members, None)
    except _FORMAT_ERRORS as e:
        raise ArchiveFormatError(f"Corrupt package archive: {e}", attempted) from e


def _restore_dir_attrs(dirs: List[Tuple[str, tarfile.TarInfo]], attempted: List[str]) -> None:
    # deepest first, after their content is written
    for path, member in sorted(dirs, key=lambda d: d[0], reverse=True):
        try:
            os.chmod(path, member.mode)
            os.utime(path, (member.mtime, member.mtime))
        except OSError as e:
            raise WriteError(f"Failed to set attributes on {path}: {e}", attempted) from e


def extract_archive(payload: bytes, install_root: str) -> InstallManifest:
    """Extract a gzip'd tar payload under ``install_root``.

    Every member is recorded before it is written, in archive order. Any
    failure aborts the extraction and leaves already written entries on disk.
    """
    root = os.path.abspath(install_root)
    manifest = InstallManifest()
    try:
        os.makedirs(root, exist_ok=True)
    except OSError as e:
        raise WriteError(f"Cannot create install directory {root}: {e}") from e

    try:
        tar = tarfile.open(fileobj=io.BytesIO(payload), mode="r:gz")
    except _FORMAT_ERRORS as e:
        raise ArchiveFormatError(f"Payload is not a gzip-compressed tar archive: {e}") from e

    dirs: List[Tuple[str, tarfile.TarInfo]] = []
    with tar:
        # iterating the archive keeps working when link extraction loads all members
        members = iter(tar)
        while True:
            member = _next_member(members, manifest.paths)
            if member is None:
                break
            try:
                dest = safe_destination(root, member)
            except UnsafeEntryPathError as e:
                raise UnsafeEntryPathError(e.entry, manifest.paths) from None
            if dest == root:
                # "./" entries point at the root itself, which is not ours
                vlog("skip-entry:", member.name)
                continue
            manifest.add(_record_path(dest, member))
            try:
                if member.isdir():
                    tar.extract(member, root, set_attrs=False, filter="tar")
                    dirs.append((dest, member))
                else:
                    tar.extract(member, root, set_attrs=True, filter="tar")
            except _FORMAT_ERRORS as e:
                raise ArchiveFormatError(f"Corrupt package archive at {member.name}: {e}", manifest.paths) from e
            except tarfile.FilterError as e:
                raise UnsafeEntryPathError(member.name, manifest.paths) from e
            except (OSError, tarfile.ExtractError) as e:
                raise WriteError(f"Failed to write {dest}: {e}", manifest.paths) from e
        _restore_dir_attrs(dirs, manifest.paths)
    return manifest


# ---- Deploy ----------------------------------------------------- #

def install_prebuilt(url: str, install_root: str, fetcher: HttpFetcher,
                     ui: Optional[OperationUI] = None, step_no: int = 1) -> InstallManifest:
    label = f"Downloading {url.rsplit('/', 1)[-1] or url}"
    if ui:
        ui.step(step_no, label)
    payload = fetcher.download(
        url, progress=(lambda done, total: ui.percent(step_no, label, done, total)) if ui else None)
    if ui:
        ui.step(step_no + 1, f"Extracting into {install_root}")
    return extract_archive(payload, install_root)


def install_source(url: str, manifest: PackageManifest) -> InstallManifest:
    # building from a source distribution has no defined protocol yet
    raise SourceBuildUnsupported(url)
