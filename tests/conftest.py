# -- kpm -------------------------------------------------------- #
# tests/conftest.py on kpm                                        #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import io
import json
import tarfile
from typing import Any, Dict, List, Optional, Union

import pytest

from kpm.config import KpmContext
from kpm.errors import TransportError
from kpm.transport import HttpFetcher

Entry = Union[str, tuple, tarfile.TarInfo]


class FakeFetcher(HttpFetcher):
    """Serves canned responses by URL; anything unknown is a 404."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.responses: Dict[str, Any] = dict(responses or {})
        self.calls: List[str] = []

    def add(self, url: str, value: Any) -> None:
        self.responses[url] = value

    def get_bytes(self, url, *, accept=None, progress=None):
        self.calls.append(url)
        if url not in self.responses:
            raise TransportError(url, f"HTTP 404 for {url}", status=404, body=b'{"message": "Not Found"}')
        value = self.responses[url]
        if isinstance(value, Exception):
            raise value
        if isinstance(value, (dict, list)):
            value = json.dumps(value)
        if isinstance(value, str):
            value = value.encode("utf-8")
        if progress:
            progress(len(value), len(value))
        return value


def build_tarball(*entries: Entry) -> bytes:
    """``"dir/"`` -> directory, ``"name"`` -> file, ``(name, data[, mode])`` -> file."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for entry in entries:
            if isinstance(entry, tarfile.TarInfo):
                tar.addfile(entry)
                continue
            if isinstance(entry, str) and entry.endswith("/"):
                info = tarfile.TarInfo(entry)
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
                continue
            if isinstance(entry, str):
                name, data, mode = entry, entry.encode("utf-8"), 0o644
            else:
                name, data = entry[0], entry[1]
                mode = entry[2] if len(entry) > 2 else 0o644
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = mode
            info.mtime = 1_700_000_000
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def tarball():
    return build_tarball


@pytest.fixture
def install_root(tmp_path) -> str:
    return str(tmp_path / "root")


@pytest.fixture
def ctx(tmp_path, install_root) -> KpmContext:
    return KpmContext.create(cache_dir=str(tmp_path / "cache"), prefix=install_root,
                             platform_tag="linux_amd64")
