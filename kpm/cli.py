# -- kpm -------------------------------------------------------- #
# kpm/cli.py on kpm                                               #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .config import ENV_DEBUG, KpmContext
from .console import p_info, p_success, set_verbose, vlog
from .errors import KpmError
from .manager import KpmManager

BUILTIN_CMDS = {"install", "remove", "list", "pack"}


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="kpm",
        description="KISS package manager.\nJust keep it simple.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    sub = p.add_subparsers(dest="cmd")

    sp_inst = sub.add_parser("install", help="Install a package.")
    sp_inst.add_argument("package", help="The package YAML file, URL or GitHub OWNER/REPO.")
    sp_inst.add_argument("--prefix", help="Where to install the package.")

    sp_rm = sub.add_parser("remove", help="Remove a package.")
    sp_rm.add_argument("package", help="The package to remove.")

    sub.add_parser("list", help="List installed packages.")

    sp_pack = sub.add_parser("pack", help="Create a package (not implemented).")
    sp_pack.add_argument("manifest", nargs="?", default="kpm.yaml")

    return p


# ---- Command handlers ------------------------------------------ #

def _cmd_install(args: argparse.Namespace) -> int:
    mgr = KpmManager(KpmContext.create(prefix=args.prefix))
    result = mgr.install(args.package)
    if not result.ok:
        print(f"[KPM ERROR] {result.message}", file=sys.stderr)
        return 1
    return 0


def _cmd_remove(args: argparse.Namespace) -> int:
    mgr = KpmManager(KpmContext.create())
    result = mgr.remove(args.package)
    if not result.ok:
        print(f"[KPM ERROR] {result.message}", file=sys.stderr)
        return 1
    p_success(result.message)
    return 0


def _cmd_list(_args: argparse.Namespace) -> int:
    mgr = KpmManager(KpmContext.create())
    names = mgr.installed()
    if not names:
        print("(no packages installed)")
        return 0
    for name in names:
        print(name)
    return 0


def _cmd_pack(args: argparse.Namespace) -> int:
    p_info(f"'kpm pack {args.manifest}' is not implemented yet.")
    return 2


# ---- main ------------------------------------------------------ #

def _parse_global_args(argv: List[str]) -> Tuple[argparse.Namespace, List[str]]:
    gp = argparse.ArgumentParser(add_help=False)
    gp.add_argument("-v", "--verbose", action="store_true")
    gp.add_argument("-h", "--help", action="store_true")
    return gp.parse_known_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    argv = list(sys.argv[1:] if argv is None else argv)
    gargs, rest = _parse_global_args(argv)
    set_verbose(gargs.verbose or os.environ.get(ENV_DEBUG) == "1")
    vlog("argv:", argv)

    parser = _build_parser()
    if gargs.help or not rest or rest[0] not in BUILTIN_CMDS:
        parser.print_help()
        return 0

    args = parser.parse_args(rest)
    handlers = {
        "install": _cmd_install,
        "remove": _cmd_remove,
        "list": _cmd_list,
        "pack": _cmd_pack,
    }
    try:
        return handlers[args.cmd](args)
    except KpmError as e:
        print(f"[KPM ERROR] {e}", file=sys.stderr)
        return 1
