# -- kpm -------------------------------------------------------- #
# kpm/platform_tag.py on kpm                                      #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import functools
import platform
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .console import vlog
from .errors import PlatformUnsupported


class HostOs(str, Enum):
    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"


class HostArch(str, Enum):
    AMD64 = "amd64"
    I386 = "i386"
    ARM64 = "arm64"
    PPC = "ppc"
    PPC64 = "ppc64"
    UNKNOWN = "unknown"


_ARCH_ALIASES = {
    "x86_64": HostArch.AMD64,
    "amd64": HostArch.AMD64,
    "x64": HostArch.AMD64,
    "i386": HostArch.I386,
    "i486": HostArch.I386,
    "i586": HostArch.I386,
    "i686": HostArch.I386,
    "x86": HostArch.I386,
    "aarch64": HostArch.ARM64,
    "aarch64_be": HostArch.ARM64,
    "arm64": HostArch.ARM64,
    "armv8b": HostArch.ARM64,
    "armv8l": HostArch.ARM64,
    "ppc64": HostArch.PPC64,
    "ppc64le": HostArch.PPC64,
    "ppc": HostArch.PPC,
    "ppcle": HostArch.PPC,
}


@dataclass(frozen=True)
class PlatformTag:
    os: HostOs
    arch: HostArch

    def __str__(self) -> str:
        return f"{self.os.value}_{self.arch.value}"


def norm_os(system: Optional[str] = None) -> Optional[HostOs]:
    sp = (system if system is not None else sys.platform).lower()
    if sp.startswith("win"):
        return HostOs.WINDOWS
    if sp.startswith("darwin") or sp == "macos":
        return HostOs.MACOS
    if sp.startswith("linux"):
        return HostOs.LINUX
    return None


def norm_arch(machine: Optional[str] = None) -> HostArch:
    m = (machine if machine is not None else platform.machine()).strip().lower()
    return _ARCH_ALIASES.get(m, HostArch.UNKNOWN)


def detect_platform_tag(system: Optional[str] = None, machine: Optional[str] = None) -> PlatformTag:
    """Derive the ``{os}_{arch}`` tag of a host (the running one by default).

    Raises PlatformUnsupported rather than guessing when either half is not
    one of the known values.
    """
    host_os = norm_os(system)
    if host_os is None:
        raise PlatformUnsupported(f"Unsupported operating system: {system or sys.platform}")
    arch = norm_arch(machine)
    if arch is HostArch.UNKNOWN:
        raise PlatformUnsupported(
            f"Could not find a valid or compatible system <os>_<arch> tag "
            f"(machine: {machine if machine is not None else platform.machine()!r})."
        )
    tag = PlatformTag(host_os, arch)
    vlog("platform-tag:", str(tag))
    return tag


@functools.lru_cache(maxsize=None)
def host_platform_tag() -> PlatformTag:
    return detect_platform_tag()
