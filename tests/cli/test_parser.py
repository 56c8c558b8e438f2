"""
Tests for CLI argument parser and command dispatch.
"""

import logging
from unittest.mock import patch

import pytest
import responses
from responses import matchers

from evm import __version__
from evm.cli.parser import CLI
from evm.core.platform import PlatformInfo
from tests.helpers import GO_URL, release

TARBALL = "go1.22.0.linux-amd64.tar.gz"


@pytest.fixture(autouse=True)
def _restore_logging():
    """CLI.run reconfigures the root logger; put it back afterwards."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def linux_host():
    with patch(
        "evm.core.platform.detect_platform",
        return_value=PlatformInfo("linux", "x86_64"),
    ):
        yield


class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_no_command_shows_help(self, capsys):
        """Test that running without a toolchain shows help."""
        result = CLI().run([])

        assert result == 1
        assert "usage:" in capsys.readouterr().out.lower()

    def test_toolchain_without_command_shows_help(self, capsys):
        result = CLI().run(["go"])

        assert result == 1
        out = capsys.readouterr().out
        assert "usage: evm go" in out
        assert "install" in out

    def test_version_flag(self, capsys):
        """Test --version flag."""
        with pytest.raises(SystemExit) as exc_info:
            CLI().run(["--version"])

        assert exc_info.value.code == 0
        assert f"evm {__version__}" in capsys.readouterr().out

    def test_unknown_toolchain(self):
        with pytest.raises(SystemExit) as exc_info:
            CLI().parse_args(["node", "list"])

        assert exc_info.value.code == 2


class TestCommandParsing:
    """Test command names and aliases."""

    @pytest.mark.parametrize("name", ["list", "ls", "ll"])
    def test_list(self, name):
        args = CLI().parse_args(["go", name])

        assert args.toolchain == "go"
        assert args.command == "list"

    @pytest.mark.parametrize("name", ["list-remote", "lr"])
    def test_list_remote(self, name):
        args = CLI().parse_args(["go", name])

        assert args.command == "list-remote"
        assert args.all is False

    @pytest.mark.parametrize("flag", ["--all", "-a"])
    def test_list_remote_all(self, flag):
        assert CLI().parse_args(["go", "lr", flag]).all is True

    @pytest.mark.parametrize("name", ["use", "u"])
    def test_use(self, name):
        args = CLI().parse_args(["go", name, "1.22.0"])

        assert args.command == "use"
        assert args.version == "1.22.0"

    @pytest.mark.parametrize("name", ["install", "in", "i"])
    def test_install(self, name):
        args = CLI().parse_args(["go", name, "1.22"])

        assert args.command == "install"
        assert args.version == "1.22"

    @pytest.mark.parametrize("name", ["uninstall", "un", "rm", "remove"])
    def test_uninstall(self, name):
        args = CLI().parse_args(["go", name, "1.21.5", "1.22.0"])

        assert args.command == "uninstall"
        assert args.versions == ["1.21.5", "1.22.0"]

    def test_uninstall_requires_version(self):
        with pytest.raises(SystemExit) as exc_info:
            CLI().parse_args(["go", "uninstall"])

        assert exc_info.value.code == 2

    def test_global_options(self, tmp_path):
        args = CLI().parse_args(
            ["--verbose", "--home", str(tmp_path), "--config", "c.yaml", "go", "ls"]
        )

        assert args.verbose is True
        assert args.home == tmp_path
        assert str(args.config) == "c.yaml"


class TestCommands:
    """Test commands end to end against a mocked go.dev."""

    @responses.activate
    def test_install_use_list(self, tmp_path, capsys, linux_host, build_go_tarball):
        content = build_go_tarball("go1.22.0")
        responses.add(
            responses.GET,
            f"{GO_URL}/",
            json=[release("go1.22.0", [(TARBALL, "linux", "amd64", content)])],
            match=[matchers.query_param_matcher({"mode": "json"})],
        )
        responses.add(responses.GET, f"{GO_URL}/{TARBALL}", body=content)
        home = ["--home", str(tmp_path)]

        assert CLI().run(home + ["go", "install", "1.22"]) == 0
        assert "Installing version go1.22.0..." in capsys.readouterr().out

        assert CLI().run(home + ["go", "use", "1.22.0"]) == 0
        assert capsys.readouterr().out == "Now using go 1.22.0\n"

        assert CLI().run(home + ["go", "ls"]) == 0
        assert capsys.readouterr().out == "* 1.22.0\n"

        assert CLI().run(home + ["go", "rm", "1.22.0"]) == 0
        out = capsys.readouterr().out
        assert "Uninstalled go 1.22.0" in out
        assert "Removed active version link" in out

    @responses.activate
    def test_list_remote(self, tmp_path, capsys):
        responses.add(
            responses.GET,
            f"{GO_URL}/",
            json=[release("go1.22.0", []), release("go1.21.7", [])],
        )

        assert CLI().run(["--home", str(tmp_path), "go", "lr"]) == 0
        assert capsys.readouterr().out == "1.22.0\n1.21.7\n"

    def test_home_from_environment(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("EVM_HOME", str(tmp_path))
        (tmp_path / ".evm" / "versions" / "go" / "1.21.5").mkdir(parents=True)

        assert CLI().run(["go", "list"]) == 0
        assert capsys.readouterr().out == "  1.21.5\n"

    def test_use_not_installed_fails(self, tmp_path, capsys):
        result = CLI().run(["--home", str(tmp_path), "go", "use", "1.22.0"])

        assert result == 1
        assert capsys.readouterr().out == ""

    @responses.activate
    def test_catalog_error_fails(self, tmp_path):
        responses.add(responses.GET, f"{GO_URL}/", status=502)

        assert CLI().run(["--home", str(tmp_path), "go", "install", "1.22"]) == 1

    def test_uninstall_missing_still_succeeds(self, tmp_path, capsys):
        result = CLI().run(["--home", str(tmp_path), "go", "uninstall", "1.22.0"])

        assert result == 0
        assert capsys.readouterr().out == ""

    def test_invalid_config_fails(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("version: 7\n")

        result = CLI().run(
            ["--home", str(tmp_path), "--config", str(config), "go", "list"]
        )

        assert result == 1

    def test_mirror_from_config(self, tmp_path, capsys):
        mirror = "https://golang.google.cn/dl"
        config = tmp_path / "config.yaml"
        config.write_text(f"mirrors:\n  go: {mirror}\n")

        with responses.RequestsMock() as rsps:
            rsps.add(responses.GET, f"{mirror}/", json=[release("go1.22.0", [])])
            result = CLI().run(
                ["--home", str(tmp_path), "--config", str(config), "go", "lr"]
            )

        assert result == 0
        assert capsys.readouterr().out == "1.22.0\n"
