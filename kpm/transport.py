# -- kpm -------------------------------------------------------- #
# kpm/transport.py on kpm                                         #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request
from typing import Any, Callable, Optional

from .console import vlog
from .errors import DownloadError, TransportError

USER_AGENT = "Kpm-Client-App"
HTTP_TIMEOUT = 20  # seconds
CHUNK_SIZE = 1024 * 64

ProgressCallback = Callable[[int, Optional[int]], None]


class HttpFetcher:
    """Blocking HTTP GET over urllib; redirects are followed by the opener."""

    def __init__(self, *, timeout: float = HTTP_TIMEOUT, user_agent: str = USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent

    def _request(self, url: str, accept: Optional[str]) -> urllib.request.Request:
        headers = {"User-Agent": self.user_agent}
        if accept:
            headers["Accept"] = accept
        return urllib.request.Request(url, headers=headers)

    def get_bytes(self, url: str, *, accept: Optional[str] = None,
                  progress: Optional[ProgressCallback] = None) -> bytes:
        vlog("GET:", url)
        try:
            with urllib.request.urlopen(self._request(url, accept), timeout=self.timeout) as resp:
                total = resp.headers.get("Content-Length")
                total_size = int(total) if total and total.isdigit() else None
                chunks = []
                done = 0
                while True:
                    chunk = resp.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    chunks.append(chunk)
                    done += len(chunk)
                    if progress:
                        progress(done, total_size)
                if total_size is not None and done != total_size:
                    raise TransportError(url, f"Incomplete response from {url}: got {done} of {total_size} bytes")
                vlog("http-status:", getattr(resp, "status", None), "bytes=", done)
                return b"".join(chunks)
        except urllib.error.HTTPError as e:
            body = e.read() or b""
            raise TransportError(url, f"HTTP {e.code} for {url}", status=e.code, body=body) from e
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            raise TransportError(url, f"Failed to GET {url}: {e}") from e

    def get_text(self, url: str) -> str:
        return self.get_bytes(url).decode("utf-8")

    def get_json(self, url: str) -> Any:
        data = self.get_bytes(url, accept="application/vnd.github+json")
        try:
            return json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise TransportError(url, f"Invalid JSON at {url}: {e}") from e

    def download(self, url: str, *, progress: Optional[ProgressCallback] = None) -> bytes:
        try:
            payload = self.get_bytes(url, progress=progress)
        except TransportError as e:
            raise DownloadError(url, f"Failed to download {url}: {e}", status=e.status) from e
        if not payload:
            raise DownloadError(url, f"Empty payload downloaded from {url}")
        return payload
