# -- kpm -------------------------------------------------------- #
# kpm/store.py on kpm                                             #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os
import tempfile
from typing import Iterable, Iterator, List, Optional

from .console import vlog
from .errors import ManifestIOError, NotInstalled
from .schema import is_valid_package_name

MANIFEST_SUFFIX = ".manifest"


class InstallManifest:
    """Ordered paths installed for one package (archive order, then hook files)."""

    def __init__(self, paths: Optional[Iterable[str]] = None):
        self._paths: List[str] = list(paths or [])

    def add(self, path: str) -> None:
        vlog("Adding file to manifest:", path)
        self._paths.append(path)

    def extend(self, paths: Iterable[str]) -> None:
        for p in paths:
            self.add(p)

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    def __iter__(self) -> Iterator[str]:
        return iter(self._paths)

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __repr__(self) -> str:
        return f"InstallManifest({self._paths!r})"


class InstallManifestStore:
    """``<cache_dir>/<package>.manifest`` files, one absolute path per line."""

    def __init__(self, cache_dir: str):
        self.cache_dir = cache_dir

    def manifest_path(self, package: str) -> str:
        if not is_valid_package_name(package):
            raise ManifestIOError(f"Invalid package name for manifest: {package!r}")
        return os.path.join(self.cache_dir, package + MANIFEST_SUFFIX)

    def exists(self, package: str) -> bool:
        return os.path.isfile(self.manifest_path(package))

    def save(self, package: str, manifest: Iterable[str]) -> str:
        path = self.manifest_path(package)
        vlog("Writing manifest file:", path)
        data = "".join(f"{p}\n" for p in manifest)
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{package}-", suffix=".tmp", dir=self.cache_dir)
        except OSError as e:
            raise ManifestIOError(f"Failed to write manifest file {path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError as e:
            raise ManifestIOError(f"Failed to write manifest file {path}: {e}") from e
        finally:
            if os.path.exists(tmp):
                try:
                    os.remove(tmp)
                except OSError as e:
                    vlog("tmp-cleanup-failed:", tmp, e)
        return path

    def load(self, package: str) -> InstallManifest:
        path = self.manifest_path(package)
        vlog("Reading manifest file:", path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except FileNotFoundError as e:
            raise NotInstalled(package) from e
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestIOError(f"Failed to read manifest file {path}: {e}") from e
        return InstallManifest(line for line in lines if line)

    def delete(self, package: str) -> None:
        path = self.manifest_path(package)
        try:
            os.remove(path)
        except FileNotFoundError as e:
            raise ManifestIOError(f"Failed to remove manifest file {path}. Does not exist.") from e
        except OSError as e:
            raise ManifestIOError(f"Failed to remove manifest file {path}: {e}") from e

    def installed_packages(self) -> List[str]:
        try:
            names = os.listdir(self.cache_dir)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise ManifestIOError(f"Failed to list {self.cache_dir}: {e}") from e
        return sorted(n[:-len(MANIFEST_SUFFIX)] for n in names
                      if n.endswith(MANIFEST_SUFFIX) and not n.startswith("."))
