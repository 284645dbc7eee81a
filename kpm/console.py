# -- kpm -------------------------------------------------------- #
# kpm/console.py on kpm                                           #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import sys
from typing import Dict, Optional

from rich.console import Console, Group
from rich.live import Live
from rich.text import Text

# Verbose logging flag and helper
_VERBOSE: bool = False

def set_verbose(enabled: bool) -> None:
    global _VERBOSE
    _VERBOSE = bool(enabled)

def vlog(*msg: object) -> None:
    if _VERBOSE:
        print("[DEBUG]", *msg, file=sys.stderr)

# Pretty printing helpers
class Colors:
    """ ANSI Color Codes """
    RED = "\033[0;31m"
    GREEN = "\033[0;32m"
    BLUE = "\033[0;34m"
    CYAN = "\033[0;36m"
    YELLOW = "\033[1;33m"
    BOLD = "\033[1m"
    RESET = "\033[0m"

def p_info(msg: str) -> None:
    print(f"{Colors.CYAN}(i){Colors.RESET} {msg}")

def p_warn(msg: str) -> None:
    print(f"{Colors.YELLOW}(!){Colors.RESET} {msg}")

def p_success(msg: str) -> None:
    print(f"{Colors.GREEN}{Colors.BOLD}(i) {msg}{Colors.RESET}")

def p_error(msg: str) -> None:
    print(f"{Colors.RED}{Colors.BOLD}(!) {msg}{Colors.RESET}")


# ---- Live UI (per package operation) --------------------------- #

class _PlainProgress:
    """Line-per-update fallback used when stdout is not a terminal."""
    def __init__(self, header: str):
        print(header)
        self._last_pct: Dict[int, int] = {}

    def step(self, idx: int, text: str) -> None:
        print(f"      {idx}. {text}")

    def percent(self, idx: int, label: str, pct: int) -> None:
        # only every 10% to keep logs short
        if pct % 10 == 0 and self._last_pct.get(idx) != pct:
            self._last_pct[idx] = pct
            print(f"      {idx}. {label} ({pct}%)")

    def finish(self, text: str, ok: bool) -> None:
        (p_success if ok else p_error)(text)


class OperationUI:
    """Header line plus numbered steps for one install/remove.

    With a terminal the steps are redrawn in place through a rich ``Live``
    and dropped on finish, leaving only the final header.
    """
    def __init__(self, header: str, header_style: str = "bold cyan"):
        self._rich = sys.stdout.isatty()
        if not self._rich:
            self._plain = _PlainProgress(header)
            return
        self._console = Console()
        self._header = Text(header, style=header_style)
        self._steps: Dict[int, Text] = {}
        self._live = Live(self._render(), console=self._console, refresh_per_second=20, transient=False)
        self._live.start()

    def _render(self) -> Group:
        return Group(self._header, *(self._steps[i] for i in sorted(self._steps)))

    def step(self, idx: int, text: str) -> None:
        vlog(f"step {idx}:", text)
        if not self._rich:
            self._plain.step(idx, text)
            return
        self._steps[idx] = Text(f"      {idx}. {text}", style="dim")
        self._live.update(self._render())

    def percent(self, idx: int, label: str, done: int, total: Optional[int]) -> None:
        if not total:
            return
        pct = min(100, int(done * 100 / total))
        if not self._rich:
            self._plain.percent(idx, label, pct)
            return
        self._steps[idx] = Text(f"      {idx}. {label} ({pct}%)", style="dim")
        self._live.update(self._render())

    def finish(self, text: str, ok: bool = True) -> None:
        if not self._rich:
            self._plain.finish(text, ok)
            return
        self._header = Text(f"(>) {text}", style="bold green" if ok else "bold red")
        self._steps.clear()
        self._live.update(self._render())
        self._live.stop()

    def __enter__(self) -> "OperationUI":
        return self

    def __exit__(self, *exc: object) -> None:
        if self._rich and self._live.is_started:
            self._live.stop()
