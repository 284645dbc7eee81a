# -- kpm -------------------------------------------------------- #
# kpm/sources.py on kpm                                           #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

from .console import vlog
from .errors import TransportError
from .github import GitHubClient, is_github_repo
from .transport import HttpFetcher


class MediaType(str, Enum):
    LOCAL = "local"
    GITHUB = "github"
    REMOTE = "remote"


@dataclass(frozen=True)
class PackageSource:
    kind: MediaType
    location: str  # path, owner/repo, or url


def classify(reference: str) -> PackageSource:
    if os.path.exists(reference):
        kind = MediaType.LOCAL
    elif is_github_repo(reference):
        kind = MediaType.GITHUB
    else:
        # anything else is handed to the HTTP layer as-is
        kind = MediaType.REMOTE
    vlog("media-type:", kind.value, reference)
    return PackageSource(kind, reference)


def resolve_manifest_url(source: PackageSource, github: GitHubClient) -> str:
    """URL of the package manifest for a remote or GitHub source."""
    if source.kind is MediaType.GITHUB:
        return github.manifest_download_url(source.location)
    return source.location


def read_manifest_text(source: PackageSource, fetcher: HttpFetcher, github: GitHubClient) -> str:
    if source.kind is MediaType.LOCAL:
        try:
            with open(source.location, "r", encoding="utf-8") as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise TransportError(source.location, f"Failed to install from file: {source.location} ({e})") from e
    url = resolve_manifest_url(source, github)
    try:
        return fetcher.get_text(url)
    except UnicodeDecodeError as e:
        raise TransportError(url, f"Manifest at {url} is not UTF-8 text") from e
