# -- kpm -------------------------------------------------------- #
# kpm/schema.py on kpm                                            #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .console import vlog
from .errors import KpmError, ParseError, ValidationError

SOURCE_KEY = "source"
DEFAULT_TAG = "latest"


# ---- Typed manifest ---------------------------------------------- #

@dataclass(frozen=True)
class DistEntry:
    key: str   # platform tag or "source"
    path: str  # relative to the endpoint


@dataclass(frozen=True)
class PackageManifest:
    name: str
    endpoint: str
    packages: Tuple[DistEntry, ...]
    tag: str = DEFAULT_TAG
    deploy: Optional[str] = None


@dataclass
class ManifestOutcome:
    manifest: Optional[PackageManifest] = None
    errors: List[KpmError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.manifest is not None and not self.errors


# ---- Parse ------------------------------------------------------- #

def parse_document(text: Union[str, bytes]) -> Dict[str, Any]:
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ParseError(f"YAML parsing error: {e}") from e
    if not isinstance(doc, dict):
        raise ParseError("Package manifest must be a YAML mapping.")
    return doc


# ---- Validate ---------------------------------------------------- #

def _scalar(value: Any) -> Optional[str]:
    # YAML turns `tag: 2.0` or `name: 123` into numbers
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def is_valid_package_name(name: str) -> bool:
    """Whether ``name`` can be used as an install manifest file name."""
    if not name or name in (".", ".."):
        return False
    return not any(sep in name for sep in ("/", "\\", os.sep, "\0"))


def _section(doc: Dict[str, Any], key: str) -> Dict[str, Any]:
    sec = doc.get(key)
    return sec if isinstance(sec, dict) else {}


def _validate_packages(dist: Dict[str, Any]) -> List[ValidationError]:
    packages = dist.get("packages")
    if not isinstance(packages, list) or not packages:
        return [ValidationError("dist.packages")]
    errors: List[ValidationError] = []
    for i, item in enumerate(packages):
        if not isinstance(item, dict) or len(item) != 1:
            errors.append(ValidationError(
                f"dist.packages[{i}]", f"<dist>.<packages>[{i}] must be a mapping with exactly one key."))
            continue
        (key, value), = item.items()
        if _scalar(key) is None or not _scalar(value):
            errors.append(ValidationError(
                f"dist.packages[{i}]", f"<dist>.<packages>[{i}] must map a platform tag to a relative path."))
    return errors


def validate_document(doc: Dict[str, Any]) -> List[ValidationError]:
    """Check a parsed document; an empty list means it can be typed."""
    dist = _section(doc, "dist")
    metadata = _section(doc, "metadata")

    errors = _validate_packages(dist)
    if not _scalar(dist.get("endpoint")):
        errors.append(ValidationError("dist.endpoint"))
    name = _scalar(metadata.get("name"))
    if not name:
        errors.append(ValidationError("metadata.name"))
    elif not is_valid_package_name(name):
        errors.append(ValidationError(
            "metadata.name",
            f"<metadata>.<name> {name!r} is not a valid package name (no path separators, . or ..)."))
    if "tag" in dist and not _scalar(dist["tag"]):
        errors.append(ValidationError("dist.tag", "<dist>.<tag> must be a string."))
    if dist.get("deploy") is not None and not _scalar(dist["deploy"]):
        errors.append(ValidationError("dist.deploy", "<dist>.<deploy> must be a relative path."))
    return errors


def _build(doc: Dict[str, Any]) -> PackageManifest:
    dist = doc["dist"]
    entries = []
    for item in dist["packages"]:
        (key, value), = item.items()
        entries.append(DistEntry(key=str(key), path=str(value)))
    deploy = dist.get("deploy")
    return PackageManifest(
        name=str(doc["metadata"]["name"]),
        endpoint=str(dist["endpoint"]),
        packages=tuple(entries),
        tag=str(dist.get("tag", DEFAULT_TAG)),
        deploy=str(deploy) if deploy is not None else None,
    )


def load_manifest(text: Union[str, bytes]) -> ManifestOutcome:
    """Parse and fully validate manifest text; never raises for bad input."""
    try:
        doc = parse_document(text)
    except ParseError as e:
        return ManifestOutcome(errors=[e])
    errors = validate_document(doc)
    if errors:
        return ManifestOutcome(errors=list(errors))
    manifest = _build(doc)
    vlog("manifest:", {"name": manifest.name, "endpoint": manifest.endpoint,
                       "tag": manifest.tag, "entries": len(manifest.packages)})
    return ManifestOutcome(manifest=manifest)
