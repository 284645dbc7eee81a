# -- kpm -------------------------------------------------------- #
# kpm/manager.py on kpm                                           #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .archive import install_prebuilt, install_source
from .config import KpmContext
from .console import OperationUI, p_error, vlog
from .distribution import SOURCE, resolve_distribution
from .errors import KpmError, RemovalError
from .github import GitHubClient
from .hooks import HookRunner, run_post_install
from .platform_tag import host_platform_tag
from .removal import remove_package
from .schema import PackageManifest, load_manifest
from .sources import classify, read_manifest_text
from .store import InstallManifestStore
from .transport import HttpFetcher

HookFactory = Callable[[str], HookRunner]


@dataclass
class OperationResult:
    ok: bool
    message: str
    error: Optional[KpmError] = None
    paths: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.ok


class KpmManager:
    def __init__(self, ctx: KpmContext, *, fetcher: Optional[HttpFetcher] = None,
                 hook_factory: Optional[HookFactory] = None):
        self.ctx = ctx
        self.fetcher = fetcher or HttpFetcher()
        self.github = GitHubClient(self.fetcher)
        self.store = InstallManifestStore(ctx.cache_dir)
        self.hook_factory = hook_factory

    # ---- Install ----
    def _platform_tag(self) -> str:
        return self.ctx.platform_tag or str(host_platform_tag())

    def load_package_manifest(self, reference: str) -> PackageManifest:
        text = read_manifest_text(classify(reference), self.fetcher, self.github)
        outcome = load_manifest(text)
        if not outcome.ok:
            for err in outcome.errors[1:]:
                p_error(str(err))
            raise outcome.errors[0]
        return outcome.manifest

    def _install_execute(self, reference: str, ui: OperationUI) -> List[str]:
        ui.step(1, f"Resolving {reference}")
        tag = self._platform_tag()
        manifest = self.load_package_manifest(reference)
        install_root = self.ctx.install_dir(manifest.name)

        ui.step(1, f"Resolving distribution of {manifest.name} for <{tag}>")
        dist = resolve_distribution(manifest, tag, self.github)
        if dist.kind == SOURCE:
            installed = install_source(dist.url, manifest)
        else:
            installed = install_prebuilt(dist.url, install_root, self.fetcher, ui=ui, step_no=2)

        if manifest.deploy:
            ui.step(4, f"Running post-install script {manifest.deploy}")
        installed.extend(run_post_install(manifest, self.ctx.cache_dir, install_root, self.hook_factory))

        path = self.store.save(manifest.name, installed)
        vlog("manifest-saved:", path, len(installed))
        return installed.paths

    def install(self, reference: str) -> OperationResult:
        ui = OperationUI(f"(>) Installing {reference}")
        with ui:
            try:
                paths = self._install_execute(reference, ui)
            except KpmError as e:
                ui.finish(f"Failed to install {reference}: {e}", ok=False)
                return OperationResult(False, str(e), error=e, paths=list(getattr(e, "attempted_paths", [])))
            ui.finish(f"Installed {reference} ({len(paths)} path(s))")
        return OperationResult(True, f"Installed {reference}", paths=paths)

    # ---- Remove ----
    def remove(self, package: str) -> OperationResult:
        try:
            report = remove_package(package, self.store)
        except RemovalError as e:
            return OperationResult(False, str(e), error=e, paths=e.failures)
        except KpmError as e:
            return OperationResult(False, str(e), error=e)
        return OperationResult(True, f"Removed {package}", paths=report.removed)

    def installed(self) -> List[str]:
        return self.store.installed_packages()
