# -- kpm -------------------------------------------------------- #
# kpm/config.py on kpm                                            #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .console import vlog
from .errors import CacheDirError
from .platform_tag import HostOs, norm_os

# ---- Paths & Constants ----------------------------------------- #

ENV_CACHE_DIR = "KPM_CACHE_DIR"
ENV_PREFIX = "KPM_PREFIX"
ENV_DEBUG = "KPM_DEBUG"


def _with_sep(path: str) -> str:
    return path if path.endswith(("/", "\\")) else path + os.sep


def default_cache_dir(env: Optional[Mapping[str, str]] = None, system: Optional[str] = None) -> str:
    env = os.environ if env is None else env
    if env.get(ENV_CACHE_DIR):
        return _with_sep(env[ENV_CACHE_DIR])
    if norm_os(system) is HostOs.WINDOWS:
        return env.get("APPDATA", os.path.expanduser("~")) + "\\kpm\\"
    return os.path.join(env.get("HOME") or os.path.expanduser("~"), ".kpm") + "/"


def default_install_dir(package_name: str, env: Optional[Mapping[str, str]] = None,
                        system: Optional[str] = None) -> str:
    env = os.environ if env is None else env
    if env.get(ENV_PREFIX):
        return _with_sep(env[ENV_PREFIX])
    if norm_os(system) is HostOs.WINDOWS:
        return env.get("PROGRAMFILES", "C:\\Program Files") + "\\" + package_name + "\\"
    return os.path.join(env.get("HOME") or os.path.expanduser("~"), ".local") + "/"


# ---- Session ---------------------------------------------------- #

@dataclass(frozen=True)
class KpmContext:
    """Per-invocation paths, resolved once and passed to every component."""

    cache_dir: str
    prefix: Optional[str] = None
    platform_tag: Optional[str] = None  # overrides host detection

    @classmethod
    def create(cls, *, cache_dir: Optional[str] = None, prefix: Optional[str] = None,
               platform_tag: Optional[str] = None) -> "KpmContext":
        cache = _with_sep(os.path.abspath(cache_dir)) if cache_dir else default_cache_dir()
        try:
            os.makedirs(cache, exist_ok=True)
        except OSError as e:
            raise CacheDirError(f"Cannot create kpm cache directory {cache}: {e}") from e
        ctx = cls(cache_dir=cache,
                  prefix=_with_sep(os.path.abspath(prefix)) if prefix else None,
                  platform_tag=platform_tag)
        vlog("context:", ctx)
        return ctx

    def install_dir(self, package_name: str) -> str:
        return self.prefix or default_install_dir(package_name)
