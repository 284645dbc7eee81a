# -- kpm -------------------------------------------------------- #
# tests/test_cli.py on kpm                                        #
# Made by DiamondGotCat, Licensed under MIT License               #
# Copyright (c) 2025 DiamondGotCat                                #
# ---------------------------------------------- DiamondGotCat -- #

from __future__ import annotations

import os

import pytest

from kpm.cli import main


@pytest.fixture(autouse=True)
def kpm_env(tmp_path, monkeypatch):
    monkeypatch.setenv("KPM_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("KPM_PREFIX", str(tmp_path / "prefix"))
    monkeypatch.delenv("KPM_DEBUG", raising=False)
    monkeypatch.setattr("kpm.console._VERBOSE", False)
    monkeypatch.setattr("kpm.manager.host_platform_tag", lambda: "linux_amd64")


@pytest.mark.parametrize("argv", [[], ["bogus"], ["-h"]])
def test_help_is_printed(argv, capsys):
    assert main(argv) == 0
    assert "KISS package manager." in capsys.readouterr().out


def test_list_without_packages(capsys):
    assert main(["list"]) == 0
    assert "(no packages installed)" in capsys.readouterr().out


def test_remove_unknown_package(capsys):
    assert main(["remove", "ghost"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("[KPM ERROR]")
    assert "not installed" in err


def test_pack_is_not_implemented(capsys):
    assert main(["pack"]) == 2
    assert "not implemented" in capsys.readouterr().out


def test_install_failure_exits_non_zero(tmp_path, capsys):
    missing = tmp_path / "nowhere" / "kpm.yaml"
    assert main(["install", missing.as_uri()]) == 1
    err = capsys.readouterr().err
    assert err.startswith("[KPM ERROR]")
    assert "kpm.yaml" in err


def test_install_list_remove_end_to_end(tmp_path, tarball, capsys):
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "demo-linux.tar.gz").write_bytes(tarball("bin/tool"))
    manifest = tmp_path / "kpm.yaml"
    manifest.write_text(
        "metadata:\n  name: demo\n"
        f"dist:\n  endpoint: {dist.as_uri()}\n  packages:\n    - linux_amd64: demo-linux.tar.gz\n",
        encoding="utf-8",
    )

    assert main(["-v", "install", str(manifest)]) == 0
    tool = tmp_path / "prefix" / "bin" / "tool"
    assert tool.read_text() == "bin/tool"
    assert os.path.isfile(tmp_path / "cache" / "demo.manifest")

    capsys.readouterr()
    assert main(["list"]) == 0
    assert capsys.readouterr().out.split() == ["demo"]

    assert main(["remove", "demo"]) == 0
    assert not tool.exists()
    assert not os.path.exists(tmp_path / "cache" / "demo.manifest")
