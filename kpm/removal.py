# -- kpm -------------------------------------------------------- #
# kpm/removal.py on kpm                                           #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Tuple

from .console import p_error, p_info, vlog
from .errors import ManifestIOError, RemovalError
from .store import InstallManifestStore


@dataclass
class RemovalReport:
    package: str
    removed: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    kept_dirs: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def _is_dir(path: str) -> bool:
    return os.path.isdir(path) and not os.path.islink(path.rstrip("/\\") or path)


def partition_paths(paths: List[str]) -> Tuple[List[str], List[str]]:
    """Split recorded paths into (files, dirs) by what is on disk now."""
    files: List[str] = []
    dirs: List[str] = []
    for p in paths:
        (dirs if _is_dir(p) else files).append(p)
    return files, dirs


def _depth(path: str) -> int:
    return os.path.normpath(path).count(os.sep)


def _remove_files(files: List[str], report: RemovalReport) -> None:
    for path in files:
        target = path.rstrip("/\\") or path
        if not os.path.lexists(target):
            p_error(f"Failed to remove file {path}. Does not exist.")
            report.missing.append(path)
            continue
        vlog("Removing file:", path)
        try:
            os.remove(target)
            report.removed.append(path)
        except OSError as e:
            p_error(f"Failed to remove file {path}: {e}")
            report.failures.append(path)


def _remove_dirs(dirs: List[str], report: RemovalReport) -> None:
    # deepest first so parents emptied by their children go too
    for path in sorted(dirs, key=_depth, reverse=True):
        if not os.path.isdir(path):
            p_error(f"Failed to remove dir {path}. Does not exist.")
            report.missing.append(path)
            continue
        try:
            if os.listdir(path):
                vlog("Keeping non-empty dir:", path)
                report.kept_dirs.append(path)
                continue
            vlog("Removing empty dir:", path)
            os.rmdir(path)
            report.removed.append(path)
        except OSError as e:
            p_error(f"Failed to remove dir {path}: {e}")
            report.failures.append(path)


def remove_package(package: str, store: InstallManifestStore) -> RemovalReport:
    """Delete everything recorded for ``package``, then its manifest.

    Raises NotInstalled (untouched filesystem) when there is no manifest, and
    RemovalError once every entry has been attempted if any deletion failed.
    """
    manifest = store.load(package)
    report = RemovalReport(package)
    files, dirs = partition_paths(manifest.paths)
    _remove_files(files, report)
    _remove_dirs(dirs, report)

    try:
        store.delete(package)
    except ManifestIOError as e:
        p_error(str(e))
        report.failures.append(store.manifest_path(package))

    if not report.ok:
        raise RemovalError(package, report.failures)
    p_info(f"Successfully removed package {package}.")
    return report
