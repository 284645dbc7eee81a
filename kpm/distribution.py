# -- kpm -------------------------------------------------------- #
# kpm/distribution.py on kpm                                      #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Union

from .console import p_info, vlog
from .errors import DistributionUnavailable
from .github import GitHubClient, is_github_repo
from .platform_tag import PlatformTag
from .schema import SOURCE_KEY, PackageManifest

PREBUILT = "prebuilt"
SOURCE = "source"


@dataclass(frozen=True)
class Distribution:
    kind: str  # PREBUILT or SOURCE
    key: str
    url: str


def resolve_endpoint(manifest: PackageManifest, github: GitHubClient) -> str:
    endpoint = manifest.endpoint
    if is_github_repo(endpoint):
        endpoint = github.release_base_url(endpoint, manifest.tag)
    if not endpoint.endswith("/"):
        endpoint += "/"
    return endpoint


def build_distribution_map(manifest: PackageManifest, endpoint: str) -> Dict[str, str]:
    # a repeated key overrides the earlier entry
    return {entry.key: endpoint + entry.path.lstrip("/") for entry in manifest.packages}


def resolve_distribution(manifest: PackageManifest, platform_tag: Union[PlatformTag, str],
                         github: GitHubClient) -> Distribution:
    """Choose the artifact URL for ``platform_tag``.

    An exact platform match always wins; the ``source`` entry is only used
    when there is none.
    """
    tag = str(platform_tag)
    dist_map = build_distribution_map(manifest, resolve_endpoint(manifest, github))
    vlog("distribution-map:", dist_map)

    if tag in dist_map:
        p_info(f"Found binary distribution for platform <{tag}>.")
        return Distribution(PREBUILT, tag, dist_map[tag])
    if SOURCE_KEY in dist_map:
        p_info(f"Binary distribution for platform <{tag}> not found. Falling back to source distribution.")
        return Distribution(SOURCE, SOURCE_KEY, dist_map[SOURCE_KEY])
    raise DistributionUnavailable(tag)
