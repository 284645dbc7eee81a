# -- kpm -------------------------------------------------------- #
# kpm/github.py on kpm                                            #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional

from .console import p_warn, vlog
from .errors import NoReleaseAvailable, NotAKpmRepository, RepositoryNotFound, TransportError
from .transport import HttpFetcher

GITHUB_API = "https://api.github.com"
MANIFEST_NAMES = ("kpm.yaml", "kpm.yml")

# GitHub repository names only contain ASCII letters, digits, '.', '-' and '_'
_REPO_RE = re.compile(r"[\w-]+/[\w.-]+")


def is_github_repo(ref: str) -> bool:
    return _REPO_RE.fullmatch(ref) is not None


def _not_found(obj: Any) -> bool:
    return isinstance(obj, dict) and obj.get("message") == "Not Found"


def _find_in_array(items: List[Any], key: str, value: str) -> int:
    for i, obj in enumerate(items):
        if isinstance(obj, dict) and obj.get(key) == value:
            return i
    return -1


class GitHubClient:
    def __init__(self, fetcher: HttpFetcher, api_base: str = GITHUB_API):
        self.fetcher = fetcher
        self.api_base = api_base.rstrip("/")

    def _get(self, repo: str, path: str) -> Any:
        url = f"{self.api_base}/repos/{repo}/{path}"
        try:
            return self.fetcher.get_json(url)
        except TransportError as e:
            if e.status != 404:
                raise
            try:
                return json.loads(e.body.decode("utf-8")) if e.body else {"message": "Not Found"}
            except (UnicodeDecodeError, json.JSONDecodeError):
                return {"message": "Not Found"}

    # ---- Releases ----
    def releases(self, repo: str) -> List[Dict[str, Any]]:
        data = self._get(repo, "releases")
        if _not_found(data) or not isinstance(data, list):
            raise RepositoryNotFound(repo)
        if not data:
            raise NoReleaseAvailable(repo)
        vlog("github-releases:", repo, [r.get("tag_name") for r in data if isinstance(r, dict)])
        return data

    def select_release(self, repo: str, releases: List[Dict[str, Any]], tag: str) -> Dict[str, Any]:
        """Pick the release for ``tag``; unknown tags fall back to the latest."""
        if tag == "latest":
            return releases[0]
        index = _find_in_array(releases, "tag_name", tag)
        if index < 0:
            p_warn(f"Could not find candidate tag {tag} in {repo}. Defaulting to latest tag available ('latest').")
            return releases[0]
        return releases[index]

    def release_base_url(self, repo: str, tag: str) -> str:
        release = self.select_release(repo, self.releases(repo), tag)
        assets = release.get("assets") or []
        url = None
        if assets and isinstance(assets[0], dict):
            url = assets[0].get("browser_download_url")
        if not url:
            raise NoReleaseAvailable(repo, f"release {release.get('tag_name')!r} has no downloadable assets")
        base = url[:url.rfind("/")]
        vlog("github-endpoint:", {"repo": repo, "tag": release.get("tag_name"), "base": base})
        return base

    # ---- Contents ----
    def manifest_download_url(self, repo: str) -> str:
        data = self._get(repo, "contents")
        if _not_found(data) or not isinstance(data, list) or not data:
            raise NotAKpmRepository(repo)
        for name in MANIFEST_NAMES:
            index = _find_in_array(data, "path", name)
            if index >= 0:
                url: Optional[str] = data[index].get("download_url")
                if url:
                    vlog("github-manifest:", url)
                    return url
        raise NotAKpmRepository(repo)
