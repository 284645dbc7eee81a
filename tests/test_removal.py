# -- kpm -------------------------------------------------------- #
# tests/test_removal.py on kpm                                    #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os

import pytest

from kpm.errors import NotInstalled, RemovalError
from kpm.removal import partition_paths, remove_package
from kpm.store import InstallManifestStore


@pytest.fixture
def store(tmp_path):
    return InstallManifestStore(str(tmp_path / "cache"))


@pytest.fixture
def installed(tmp_path, store):
    """A small installed tree: root/bin/tool, root/share/doc/readme, dirs recorded."""
    root = tmp_path / "root"
    (root / "bin").mkdir(parents=True)
    (root / "share" / "doc").mkdir(parents=True)
    (root / "bin" / "tool").write_text("tool")
    (root / "share" / "doc" / "readme").write_text("readme")
    paths = [
        str(root / "bin" / "tool"),
        str(root / "share") + os.sep,
        str(root / "share" / "doc") + os.sep,
        str(root / "share" / "doc" / "readme"),
    ]
    store.save("demo", paths)
    return root


def test_partition_uses_current_filesystem_state(installed):
    files, dirs = partition_paths([str(installed / "bin" / "tool"), str(installed / "bin")])
    assert files == [str(installed / "bin" / "tool")]
    assert dirs == [str(installed / "bin")]


def test_remove_deletes_files_dirs_and_manifest(installed, store, capsys):
    report = remove_package("demo", store)

    assert report.ok
    assert not (installed / "bin" / "tool").exists()
    assert not (installed / "share").exists()
    assert not store.exists("demo")
    assert "Successfully removed package demo." in capsys.readouterr().out


def test_nested_dirs_are_removed_deepest_first(installed, store):
    report = remove_package("demo", store)
    dirs = [p for p in report.removed if p.endswith(os.sep)]
    assert dirs == [str(installed / "share" / "doc") + os.sep, str(installed / "share") + os.sep]


def test_non_empty_dirs_are_kept(installed, store):
    (installed / "share" / "user-data.txt").write_text("mine")
    report = remove_package("demo", store)

    assert report.ok
    assert (installed / "share" / "user-data.txt").exists()
    assert report.kept_dirs == [str(installed / "share") + os.sep]
    assert not store.exists("demo")


def test_missing_file_is_logged_but_not_a_failure(installed, store, capsys):
    (installed / "bin" / "tool").unlink()
    report = remove_package("demo", store)

    assert report.ok
    assert report.missing == [str(installed / "bin" / "tool")]
    assert "Does not exist." in capsys.readouterr().out
    assert not store.exists("demo")


def test_unknown_package_is_not_installed(installed, store):
    with pytest.raises(NotInstalled):
        remove_package("ghost", store)
    assert (installed / "bin" / "tool").exists()
    assert store.exists("demo")


def test_failed_deletion_raises_after_attempting_everything(installed, store, monkeypatch):
    stuck = str(installed / "bin" / "tool")
    real_remove = os.remove

    def flaky_remove(path):
        if path == stuck:
            raise PermissionError(13, "Permission denied", path)
        return real_remove(path)

    monkeypatch.setattr("kpm.removal.os.remove", flaky_remove)
    with pytest.raises(RemovalError) as exc:
        remove_package("demo", store)

    assert exc.value.failures == [stuck]
    assert os.path.exists(stuck)
    # the rest of the package is still cleaned up
    assert not (installed / "share").exists()
