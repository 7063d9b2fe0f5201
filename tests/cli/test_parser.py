"""
Tests for the elankit command-line interface.
"""

import subprocess
from unittest.mock import patch

import pytest

from elankit.cli.parser import CLI
from elankit.config import Cfg
from elankit.toolchain.command import Command


@pytest.fixture
def cli():
    return CLI()


@pytest.fixture
def run_cli(cli, elan_home):
    """Run the CLI against the temporary elan home."""

    def _run(*args):
        return cli.run(["--elan-home", str(elan_home), *args])

    return _run


@pytest.fixture
def home_cfg(elan_home):
    return Cfg(elan_home, recursion_count=0)


@pytest.mark.unit
class TestParser:
    def test_install_arguments(self, cli):
        args = cli.parse_args(
            ["toolchain", "install", "my-lean", "--installer", "a.tar.gz", "--installer", "b.tar.gz"]
        )

        assert args.command == "toolchain"
        assert args.toolchain_command == "install"
        assert args.toolchains == ["my-lean"]
        assert args.installer == ["a.tar.gz", "b.tar.gz"]

    def test_run_keeps_remaining_arguments(self, cli):
        args = cli.parse_args(["run", "stable", "lean", "--run", "Main.lean"])

        assert args.binary == "lean"
        assert args.args == ["--run", "Main.lean"]

    def test_no_command_prints_help(self, cli, capsys):
        assert cli.run([]) == 1
        assert "usage: elankit" in capsys.readouterr().out

    def test_missing_subcommand(self, run_cli):
        assert run_cli("toolchain") == 1


@pytest.mark.integration
class TestCommands:
    def test_list_empty(self, run_cli, capsys):
        assert run_cli("toolchain", "list") == 0
        assert "no installed toolchains" in capsys.readouterr().out

    def test_link_list_default_uninstall(self, run_cli, custom_src, home_cfg, capsys):
        assert run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy") == 0
        assert run_cli("default", "my-lean") == 0
        capsys.readouterr()

        assert run_cli("toolchain", "list", "--components") == 0
        out = capsys.readouterr().out
        assert "my-lean (default)" in out
        assert "lean: installed (required)" in out
        assert "leanpkg: missing (optional)" in out

        assert home_cfg.get_default() == "my-lean"

        assert run_cli("toolchain", "uninstall", "my-lean") == 0
        assert not (home_cfg.toolchains_dir / "my-lean").exists()

    def test_show_default(self, run_cli, custom_src, capsys):
        assert run_cli("default") == 1

        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")
        run_cli("default", "my-lean")
        capsys.readouterr()

        assert run_cli("default") == 0
        assert capsys.readouterr().out.strip() == "my-lean"

    def test_which(self, run_cli, custom_src, home_cfg, capsys):
        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")
        capsys.readouterr()

        assert run_cli("which", "lean", "--toolchain", "my-lean") == 0

        expected = home_cfg.toolchains_dir / "my-lean" / "bin" / home_cfg.platform.exe("lean")
        assert capsys.readouterr().out.strip() == str(expected)

    def test_which_missing_binary(self, run_cli, custom_src, capsys):
        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")

        assert run_cli("which", "leanpkg", "--toolchain", "my-lean") == 1
        assert "does not have the binary" in capsys.readouterr().err

    def test_no_toolchain_selected(self, run_cli, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)

        assert run_cli("which", "lean") == 1
        assert "error: no default toolchain configured" in capsys.readouterr().err

    def test_override_selects_toolchain(self, run_cli, custom_src, tmp_path, monkeypatch, capsys):
        project = tmp_path / "project"
        (project / "src").mkdir(parents=True)
        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")

        assert run_cli("override", "set", "my-lean", "--path", str(project)) == 0
        monkeypatch.chdir(project / "src")
        capsys.readouterr()

        assert run_cli("which", "lean") == 0
        assert "my-lean" in capsys.readouterr().out

        assert run_cli("override", "unset", "--path", str(project)) == 0
        assert run_cli("which", "lean") == 1

    def test_doc_path(self, run_cli, custom_src, capsys):
        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")
        capsys.readouterr()

        assert run_cli("doc", "--toolchain", "my-lean", "--path") == 0
        assert capsys.readouterr().out.strip().endswith("index.html")

    def test_install_from_installer(self, run_cli, make_tar_gz, home_cfg):
        archive = make_tar_gz("lean.tar.gz", {"bin/lean": "lean"})

        assert run_cli("toolchain", "install", "my-lean", "--installer", str(archive)) == 0
        assert (home_cfg.toolchains_dir / "my-lean" / "bin" / "lean").exists()

    def test_link_rejects_release_names(self, run_cli, custom_src, capsys):
        assert run_cli("toolchain", "link", "stable", str(custom_src)) == 1
        assert "invalid custom toolchain name" in capsys.readouterr().err

    def test_run(self, run_cli, custom_src):
        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")

        with patch.object(
            Command, "run", autospec=True, return_value=subprocess.CompletedProcess([], 3)
        ) as spawned:
            assert run_cli("run", "my-lean", "lean", "--version") == 3

        command = spawned.call_args[0][0]
        assert command.args == ["--version"]
        assert command.get_env("ELAN_TOOLCHAIN") == "my-lean"

    def test_run_borrows_leanpkg_from_default(self, run_cli, custom_src, tmp_path, home_cfg):
        with_leanpkg = tmp_path / "with-leanpkg"
        (with_leanpkg / "bin").mkdir(parents=True)
        for name in ("lean", "leanpkg"):
            (with_leanpkg / "bin" / home_cfg.platform.exe(name)).write_text(name)
        run_cli("toolchain", "link", "full-lean", str(with_leanpkg), "--copy")
        run_cli("toolchain", "link", "my-lean", str(custom_src), "--copy")
        run_cli("default", "full-lean")

        with patch.object(
            Command, "run", autospec=True, return_value=subprocess.CompletedProcess([], 0)
        ) as spawned:
            assert run_cli("run", "my-lean", "leanpkg", "build") == 0

        command = spawned.call_args[0][0]
        assert "full-lean" in str(command.program)
        assert command.get_env("ELAN_TOOLCHAIN") == "my-lean"

    def test_telemetry_toggle(self, run_cli, home_cfg, capsys):
        assert run_cli("telemetry", "enable") == 0
        assert home_cfg.telemetry_enabled()

        assert run_cli("telemetry", "disable") == 0
        assert not home_cfg.telemetry_enabled()

    def test_malformed_settings_reported_as_error(self, run_cli, elan_home, capsys):
        (elan_home / "settings.yaml").write_text("version: abc\n")

        assert run_cli("default") == 1
        assert "error: 'version' must be an integer" in capsys.readouterr().err
