"""CLI entry point for the gomodgate proxy server.

Prepares the environment for the go command, resolves the download cache,
loads the access rules and starts the server.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, MutableMapping, Optional

from common.logging_utils import configure_logging
from constants import Constants, ExitCodes

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments.

    Args:
        args: Parsed CLI arguments.
    """
    configure_logging(getattr(args, "LOG_LEVEL", None))

    # Add file handler if --logfile specified
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def prepare_environment(env: MutableMapping[str, str], cache_dir: Optional[str] = None) -> None:
    """Set defaults the go command needs to run unattended.

    Git must never prompt for credentials, and ssh connection sharing is
    disabled so concurrent fetches do not wait on each other. A cache dir,
    when given, becomes GOPATH.
    """
    if not env.get("GIT_TERMINAL_PROMPT"):
        env["GIT_TERMINAL_PROMPT"] = "0"
    if not env.get("GIT_SSH") and not env.get("GIT_SSH_COMMAND"):
        env["GIT_SSH_COMMAND"] = "ssh -o ControlMaster=no"
    if cache_dir:
        env["GOPATH"] = cache_dir


def build_ops(config):
    """Resolve the download root and assemble the operations object.

    Args:
        config: ProxyConfig; ``download_root`` is filled in.

    Returns:
        GoModuleOps ready to serve.
    """
    from proxy.cache import VersionListCache  # pylint: disable=import-outside-toplevel
    from proxy.errors import RuleLoadError, ToolchainError  # pylint: disable=import-outside-toplevel
    from proxy.filter import AccessFilter, load_rules  # pylint: disable=import-outside-toplevel
    from proxy.ops import GoModuleOps  # pylint: disable=import-outside-toplevel
    from proxy.toolchain import GoToolchain  # pylint: disable=import-outside-toplevel

    toolchain = GoToolchain(config.go_binary)
    try:
        gopath = toolchain.gopath()
    except ToolchainError as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.TOOLCHAIN_ERROR.value)
    config.download_root = os.path.join(gopath, Constants.DOWNLOAD_SUBDIR)

    try:
        allow_rules = load_rules(config.allow_file)
    except RuleLoadError as e:
        logger.error("could not load whitelist: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    try:
        deny_rules = load_rules(config.deny_file)
    except RuleLoadError as e:
        logger.error("could not load blacklist: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    if not allow_rules and not deny_rules:
        logger.info("No access rules loaded - all modules will be allowed")

    return GoModuleOps(
        toolchain=toolchain,
        list_cache=VersionListCache(config.download_root, ttl=config.list_ttl),
        access_filter=AccessFilter(allow_rules, deny_rules),
    )


def run_proxy_server(args: Any) -> None:
    """Entry point for the proxy server command.

    Args:
        args: Parsed CLI arguments namespace.
    """
    _setup_logging(args)

    # Lazy import to keep --help free of aiohttp
    try:
        from proxy.server import ProxyConfig, run_proxy_server_sync  # pylint: disable=import-outside-toplevel
    except ImportError as e:
        sys.stderr.write(
            f"Proxy server not available: {e}\n"
            "Make sure 'aiohttp' is installed: pip install aiohttp\n"
        )
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    try:
        config = ProxyConfig.from_args(args)
    except ValueError as e:
        logger.error("invalid listen address: %s", e)
        sys.exit(ExitCodes.CONFIG_ERROR.value)

    prepare_environment(os.environ, config.cache_dir)
    ops = build_ops(config)

    run_proxy_server_sync(config, ops)
