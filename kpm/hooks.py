# -- kpm -------------------------------------------------------- #
# kpm/hooks.py on kpm                                             #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import json
import os
import subprocess
import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

from .console import p_error, p_warn, vlog
from .errors import HookError
from .schema import PackageManifest

HOOK_FUNCTION = "post_install"
RESULT_MARKER = "__KPM_POST_INSTALL_RESULT__"
HOOK_TIMEOUT = 600  # seconds


@dataclass
class PostInstallResult:
    additional_files: List[str] = field(default_factory=list)


class HookRunner(Protocol):
    def run(self, name: str, cache_path: str, install_path: str) -> PostInstallResult: ...


# Runs inside the child interpreter: argv = script, name, cache, install
_BOOTSTRAP = f"""
import importlib.util, json, os, sys
script, args = sys.argv[1], sys.argv[2:]
sys.path.insert(0, os.path.dirname(os.path.abspath(script)))
sys.dont_write_bytecode = True
spec = importlib.util.spec_from_file_location("kpm_post_install", script)
module = importlib.util.module_from_spec(spec)
spec.loader.exec_module(module)
func = getattr(module, {HOOK_FUNCTION!r}, None)
if not callable(func):
    sys.exit("User must define a '{HOOK_FUNCTION}' function.")
result = func(*args)
if not isinstance(result, dict):
    sys.exit("Function '{HOOK_FUNCTION}' must return a dictionary.")
files = result.get("additional_files", [])
if not isinstance(files, list):
    sys.exit("'additional_files' must be a list.")
# relative paths are relative to the script folder, the child's cwd
files = [os.path.abspath(f) if isinstance(f, str) else f for f in files]
print({RESULT_MARKER!r} + json.dumps(files))
"""


class PythonScriptHookRunner:
    """Runs a package's Python deploy script in a separate interpreter.

    The script must define ``post_install(name, cache_path, install_path)``
    returning ``{"additional_files": [...]}``.
    """

    def __init__(self, script: str, *, python: Optional[str] = None, timeout: float = HOOK_TIMEOUT):
        self.script = script
        self.python = python or os.environ.get("KPM_PYTHON") or sys.executable
        self.timeout = timeout

    def run(self, name: str, cache_path: str, install_path: str) -> PostInstallResult:
        vlog("Running:", os.path.basename(self.script))
        try:
            proc = subprocess.run(
                [self.python, "-c", _BOOTSTRAP, self.script, name, cache_path, install_path],
                cwd=os.path.dirname(os.path.abspath(self.script)),
                capture_output=True, text=True, timeout=self.timeout, check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise HookError(f"Failed to launch post-install script {self.script}: {e}") from e

        for line in proc.stdout.splitlines():
            if line.startswith(RESULT_MARKER):
                continue
            print(line)
        if proc.returncode != 0:
            detail = proc.stderr.strip().splitlines()[-1] if proc.stderr.strip() else f"exit code {proc.returncode}"
            raise HookError(f"Post-install script {os.path.basename(self.script)} failed: {detail}")

        payload = [ln for ln in proc.stdout.splitlines() if ln.startswith(RESULT_MARKER)]
        if not payload:
            raise HookError("Post-install script did not report a result.")
        try:
            files = json.loads(payload[-1][len(RESULT_MARKER):])
        except json.JSONDecodeError as e:
            raise HookError(f"Invalid post-install result: {e}") from e
        return PostInstallResult(additional_files=list(files))


def deploy_script_path(manifest: PackageManifest, install_root: str) -> Optional[str]:
    if not manifest.deploy:
        return None
    root = os.path.realpath(install_root)
    path = os.path.realpath(os.path.join(install_root, manifest.deploy))
    if os.path.commonpath([root, path]) != root:
        raise HookError(f"Deploy script <{manifest.deploy}> is outside the install directory.")
    return path


def verified_additional_files(result: PostInstallResult, base_dir: str) -> List[str]:
    """Existing claimed files as absolute paths; relative ones resolve against ``base_dir``."""
    files: List[str] = []
    for i, item in enumerate(result.additional_files):
        if not isinstance(item, str):
            p_error(f"additional_files[{i}] is not a string.")
            continue
        path = os.path.normpath(os.path.join(base_dir, item))
        if not os.path.exists(path):
            p_warn(f"Additional file <{item}> not found. Ignoring...")
            continue
        files.append(path)
    return files


def run_post_install(manifest: PackageManifest, cache_path: str, install_root: str,
                     runner_factory: Optional[Callable[[str], HookRunner]] = None) -> List[str]:
    """Run the declared deploy script, if any, and return the files it added.

    Hook problems are reported but never fail the install.
    """
    try:
        script = deploy_script_path(manifest, install_root)
        if script is None:
            return []
        if not os.path.isfile(script):
            raise HookError(f"Deploy script referenced, but file <{manifest.deploy}> does not exist.")
        hook = (runner_factory or PythonScriptHookRunner)(script)
        result = hook.run(manifest.name, cache_path, install_root)
    except HookError as e:
        p_error(str(e))
        return []
    return verified_additional_files(result, os.path.dirname(script))
