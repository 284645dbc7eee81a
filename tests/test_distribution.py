# -- kpm -------------------------------------------------------- #
# tests/test_distribution.py on kpm                               #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import pytest

from kpm.distribution import PREBUILT, SOURCE, resolve_distribution
from kpm.errors import DistributionUnavailable, NoReleaseAvailable, RepositoryNotFound, TransportError
from kpm.github import GitHubClient
from kpm.schema import DistEntry, PackageManifest

RELEASES = "https://api.github.com/repos/acme/tool/releases"


def _manifest(endpoint="https://example.com/pkg", tag="latest", packages=None):
    entries = packages or [("linux_amd64", "a.tar.gz"), ("source", "b.tar.gz")]
    return PackageManifest(name="demo", endpoint=endpoint, tag=tag,
                           packages=tuple(DistEntry(k, v) for k, v in entries))


def _release(tag):
    return {"tag_name": tag, "assets": [
        {"browser_download_url": f"https://github.com/acme/tool/releases/download/{tag}/a.tar.gz"},
        {"browser_download_url": f"https://mirror.example.com/{tag}/other.tar.gz"},
    ]}


@pytest.fixture
def github(fetcher):
    return GitHubClient(fetcher)


def test_exact_platform_match_wins_over_source(github):
    dist = resolve_distribution(_manifest(), "linux_amd64", github)
    assert dist.kind == PREBUILT
    assert dist.url == "https://example.com/pkg/a.tar.gz"


def test_missing_platform_falls_back_to_source(github, capsys):
    dist = resolve_distribution(_manifest(), "darwin_arm64", github)
    assert dist.kind == SOURCE
    assert dist.url == "https://example.com/pkg/b.tar.gz"
    assert "Falling back to source distribution" in capsys.readouterr().out


def test_no_platform_and_no_source_is_unavailable(github):
    manifest = _manifest(packages=[("windows_amd64", "w.tar.gz")])
    with pytest.raises(DistributionUnavailable) as exc:
        resolve_distribution(manifest, "linux_arm64", github)
    assert exc.value.platform_tag == "linux_arm64"
    assert "linux_arm64" in str(exc.value)


def test_endpoint_with_trailing_separator_is_not_doubled(github):
    dist = resolve_distribution(_manifest(endpoint="https://example.com/pkg/"), "linux_amd64", github)
    assert dist.url == "https://example.com/pkg/a.tar.gz"


def test_github_latest_uses_first_release(fetcher, github):
    fetcher.add(RELEASES, [_release("v3.0"), _release("v2.0")])
    dist = resolve_distribution(_manifest(endpoint="acme/tool"), "linux_amd64", github)
    assert dist.url == "https://github.com/acme/tool/releases/download/v3.0/a.tar.gz"


def test_github_tag_selects_matching_release(fetcher, github):
    fetcher.add(RELEASES, [_release("v3.0"), _release("v2.0")])
    dist = resolve_distribution(_manifest(endpoint="acme/tool", tag="v2.0"), "linux_amd64", github)
    assert dist.url == "https://github.com/acme/tool/releases/download/v2.0/a.tar.gz"


def test_github_unknown_tag_falls_back_to_latest(fetcher, github, capsys):
    fetcher.add(RELEASES, [_release("v3.0"), _release("v2.0")])
    dist = resolve_distribution(_manifest(endpoint="acme/tool", tag="v9.9"), "linux_amd64", github)
    assert dist.url == "https://github.com/acme/tool/releases/download/v3.0/a.tar.gz"
    assert "Defaulting to latest" in capsys.readouterr().out


def test_github_repository_not_found_message(fetcher, github):
    fetcher.add(RELEASES, {"message": "Not Found", "documentation_url": "https://docs.github.com"})
    with pytest.raises(RepositoryNotFound):
        resolve_distribution(_manifest(endpoint="acme/tool"), "linux_amd64", github)


def test_github_repository_404(github):
    # the fake fetcher answers unknown URLs with a 404
    with pytest.raises(RepositoryNotFound):
        resolve_distribution(_manifest(endpoint="acme/tool"), "linux_amd64", github)


def test_github_other_http_errors_propagate(fetcher, github):
    fetcher.add(RELEASES, TransportError(RELEASES, "HTTP 500", status=500))
    with pytest.raises(TransportError):
        resolve_distribution(_manifest(endpoint="acme/tool"), "linux_amd64", github)


def test_github_without_releases(fetcher, github):
    fetcher.add(RELEASES, [])
    with pytest.raises(NoReleaseAvailable):
        resolve_distribution(_manifest(endpoint="acme/tool"), "linux_amd64", github)


def test_github_release_without_assets(fetcher, github):
    fetcher.add(RELEASES, [{"tag_name": "v1.0", "assets": []}])
    with pytest.raises(NoReleaseAvailable):
        resolve_distribution(_manifest(endpoint="acme/tool"), "linux_amd64", github)
