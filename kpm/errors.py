# -- kpm -------------------------------------------------------- #
# kpm/errors.py on kpm                                            #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

from typing import List, Optional


class KpmError(Exception):
    pass


# ---- Manifest ---------------------------------------------------- #

class ParseError(KpmError):
    """Package manifest text is not a well-formed YAML mapping."""


class ValidationError(KpmError):
    """Package manifest is well-formed but a required field is missing or ill-typed."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"<{field}> field required.")


# ---- Resolution -------------------------------------------------- #

class PlatformUnsupported(KpmError):
    pass


class DistributionUnavailable(KpmError):
    def __init__(self, platform_tag: str):
        self.platform_tag = platform_tag
        super().__init__(
            f"Binary distribution for platform <{platform_tag}> not found "
            "and source distribution not available."
        )


class RepositoryError(KpmError):
    def __init__(self, repo: str, message: str):
        self.repo = repo
        super().__init__(message)


class RepositoryNotFound(RepositoryError):
    def __init__(self, repo: str):
        super().__init__(repo, f"Failed to find the github repo: {repo}")


class NoReleaseAvailable(RepositoryError):
    def __init__(self, repo: str, detail: str = "no release is available"):
        super().__init__(repo, f"Found repo {repo}, but {detail}.")


class NotAKpmRepository(RepositoryError):
    def __init__(self, repo: str):
        super().__init__(repo, f"Repository {repo} does not provide a kpm.yaml or kpm.yml manifest.")


class TransportError(KpmError):
    def __init__(self, url: str, message: str, status: Optional[int] = None, body: bytes = b""):
        self.url = url
        self.status = status
        self.body = body
        super().__init__(message)


class DownloadError(TransportError):
    pass


# ---- Install ----------------------------------------------------- #

class ArchiveError(KpmError):
    def __init__(self, message: str, attempted_paths: Optional[List[str]] = None):
        # paths recorded before the failure; some of them may be on disk
        self.attempted_paths: List[str] = list(attempted_paths or [])
        super().__init__(message)


class ArchiveFormatError(ArchiveError):
    pass


class UnsafeEntryPathError(ArchiveError):
    def __init__(self, entry: str, attempted_paths: Optional[List[str]] = None):
        self.entry = entry
        super().__init__(f"Archive entry escapes the install root: {entry}", attempted_paths)


class WriteError(ArchiveError):
    pass


class SourceBuildUnsupported(KpmError):
    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Building from source distribution is not supported ({url}).")


class HookError(KpmError):
    pass


# ---- Install manifest / removal ----------------------------------- #

class ManifestIOError(KpmError):
    pass


class NotInstalled(KpmError):
    def __init__(self, package: str):
        self.package = package
        super().__init__(f"Package {package} is not installed.")


class RemovalError(KpmError):
    def __init__(self, package: str, failures: List[str]):
        self.package = package
        self.failures = list(failures)
        super().__init__(f"Failed to remove package {package} ({len(self.failures)} error(s)).")


class CacheDirError(KpmError):
    pass
