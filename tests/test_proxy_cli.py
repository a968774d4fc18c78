"""Tests for proxy CLI helpers."""

import os
from unittest.mock import patch

import pytest

from args import parse_args
from cli_proxy import build_ops, prepare_environment
from constants import ExitCodes
from proxy.errors import ToolchainError
from proxy.ops import GoModuleOps
from proxy.server import ProxyConfig


class TestArgParsing:
    def test_defaults(self):
        ns = parse_args([])
        assert ns.LISTEN == "0.0.0.0:8081"
        assert ns.CACHE_DIR is None
        assert ns.WHITELIST is None
        assert ns.BLACKLIST is None
        assert ns.GO_BINARY == "go"
        assert ns.LOG_LEVEL == "INFO"

    def test_all_flags(self):
        ns = parse_args([
            "--listen", ":9090",
            "--cacheDir", "/tmp/gomod",
            "--whitelist", "allow.txt",
            "--blacklist", "deny.txt",
            "--loglevel", "debug",
            "--logfile", "/tmp/gomodgate.log",
        ])
        assert ns.LISTEN == ":9090"
        assert ns.CACHE_DIR == "/tmp/gomod"
        assert ns.WHITELIST == "allow.txt"
        assert ns.BLACKLIST == "deny.txt"
        assert ns.LOG_LEVEL == "DEBUG"
        assert ns.LOG_FILE == "/tmp/gomodgate.log"


class TestPrepareEnvironment:
    def test_sets_git_defaults(self):
        env = {}
        prepare_environment(env)
        assert env == {
            "GIT_TERMINAL_PROMPT": "0",
            "GIT_SSH_COMMAND": "ssh -o ControlMaster=no",
        }

    def test_keeps_existing_values(self):
        env = {"GIT_TERMINAL_PROMPT": "1", "GIT_SSH": "/usr/bin/plink"}
        prepare_environment(env)
        assert env == {"GIT_TERMINAL_PROMPT": "1", "GIT_SSH": "/usr/bin/plink"}

    def test_cache_dir_becomes_gopath(self):
        env = {"GOPATH": "/home/user/go"}
        prepare_environment(env, "/srv/gomod")
        assert env["GOPATH"] == "/srv/gomod"


class TestBuildOps:
    """Tests for startup assembly."""

    def test_builds_ops_under_download_root(self, tmp_path):
        deny = tmp_path / "blacklist"
        deny.write_text("example\\.com/secret/.*\n", encoding="utf-8")
        config = ProxyConfig(deny_file=str(deny))

        with patch("proxy.toolchain.GoToolchain.gopath", return_value="/srv/go"):
            ops = build_ops(config)

        assert isinstance(ops, GoModuleOps)
        assert config.download_root == os.path.join("/srv/go", "pkg/mod/cache/download")
        assert ops.list_cache.root == config.download_root
        assert ops.filter("example.com/secret/x") is False
        assert ops.filter("example.com/public") is True

    def test_missing_gopath_exits(self):
        with patch("proxy.toolchain.GoToolchain.gopath", side_effect=ToolchainError(["go"], message="missing $GOPATH")):
            with pytest.raises(SystemExit) as excinfo:
                build_ops(ProxyConfig())
        assert excinfo.value.code == ExitCodes.TOOLCHAIN_ERROR.value

    def test_unreadable_rules_exit(self, tmp_path):
        config = ProxyConfig(allow_file=str(tmp_path / "missing"))
        with patch("proxy.toolchain.GoToolchain.gopath", return_value="/srv/go"):
            with pytest.raises(SystemExit) as excinfo:
                build_ops(config)
        assert excinfo.value.code == ExitCodes.FILE_ERROR.value
