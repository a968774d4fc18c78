"""Module proxy server using aiohttp."""

from __future__ import annotations

import asyncio
import logging
import signal
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Optional, Tuple

from aiohttp import web

from common.logging_utils import extra_context
from constants import Constants

from .errors import (
    CoordinateMismatchError,
    InvalidPathError,
    ToolchainDecodeError,
    ToolchainError,
)
from .ops import ServerOps
from .request_logger import setup_request_logging
from .request_parser import ParsedRequest, RequestKind, RequestParser

logger = logging.getLogger(__name__)

CONTEXT_KEY = web.RequestKey("context", dict)

_CONTENT_TYPES = {
    RequestKind.LIST: "text/plain",
    RequestKind.LATEST: "application/json",
    RequestKind.INFO: "application/json",
    RequestKind.MOD: "text/plain",
    RequestKind.ZIP: "application/zip",
}

# Diagnostics from the go command meaning the module or version does not exist.
_NOT_FOUND_MARKERS = (
    "not found",
    "unknown revision",
    "no matching versions",
    "invalid version",
)


def split_listen(listen: str) -> Tuple[str, int]:
    """Split a ``[host]:port`` listen address.

    An empty host listens on all interfaces.

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = listen.rpartition(":")
    if not sep:
        raise ValueError(f"listen address {listen!r} has no port")
    return host.strip("[]") or "0.0.0.0", int(port)


@dataclass
class ProxyConfig:
    """Configuration for the proxy server."""

    host: str = "0.0.0.0"
    port: int = 8081
    cache_dir: Optional[str] = None
    download_root: str = ""
    go_binary: str = Constants.DEFAULT_GO_BINARY
    allow_file: Optional[str] = None
    deny_file: Optional[str] = None
    list_ttl: float = Constants.LIST_EXPIRE_SEC

    @classmethod
    def from_args(cls, args: Any) -> "ProxyConfig":
        """Create config from CLI arguments.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            ProxyConfig instance. ``download_root`` is resolved at startup.
        """
        host, port = split_listen(getattr(args, "LISTEN", None) or Constants.DEFAULT_LISTEN)
        return cls(
            host=host,
            port=port,
            cache_dir=getattr(args, "CACHE_DIR", None) or None,
            go_binary=getattr(args, "GO_BINARY", None) or Constants.DEFAULT_GO_BINARY,
            allow_file=getattr(args, "WHITELIST", None) or None,
            deny_file=getattr(args, "BLACKLIST", None) or None,
        )


class ModuleProxyServer:
    """HTTP front end for the Go module proxy protocol.

    Parses proxy request paths, gates them through the operations object's
    filter and serves the files the operations return. Errors from the
    operations are mapped to HTTP statuses here and nowhere else.
    """

    def __init__(self, config: ProxyConfig, ops: ServerOps):
        """Initialize the proxy server.

        Args:
            config: Server configuration.
            ops: Operations answering proxy requests.
        """
        self._config = config
        self._ops = ops
        self._parser = RequestParser()
        self._app: Optional[web.Application] = None
        self._runner: Optional[web.AppRunner] = None

    def _create_app(self) -> web.Application:
        """Create the aiohttp application."""
        app = web.Application()
        setup_request_logging(app)
        app.router.add_get(Constants.HEALTH_PATH, self._health_check)
        # No HEAD: it would resolve the module and never send the opened file.
        app.router.add_get("/{path:.*}", self._handle_request, allow_head=False)
        return app

    async def _health_check(self, request: web.Request) -> web.Response:
        """Health check endpoint."""
        body: Dict[str, Any] = {"status": "ok"}
        list_cache = getattr(self._ops, "list_cache", None)
        if list_cache is not None:
            body["cache"] = list_cache.stats()
        return web.json_response(body)

    async def _handle_request(self, request: web.Request) -> web.Response:
        """Handle a module proxy request.

        Args:
            request: Incoming HTTP request.

        Returns:
            HTTP response.
        """
        context = request[CONTEXT_KEY] = self._ops.new_context(request)

        try:
            parsed = self._parser.parse(request.path)
        except InvalidPathError as e:
            return web.Response(status=400, text=f"{e}\n")
        if parsed is None:
            return web.Response(status=404, text="not found\n")

        if not self._ops.filter(parsed.module_path):
            return web.Response(status=403, text="forbidden\n")

        logger.debug(
            "Request: %s -> %s %s",
            request.path,
            parsed.kind.value,
            parsed.coordinate,
            extra=extra_context(context=context or None),
        )

        loop = asyncio.get_running_loop()
        try:
            f = await loop.run_in_executor(None, self._dispatch, parsed)
        except Exception as e:  # pylint: disable=broad-exception-caught
            return self._error_response(parsed, e, context)

        return web.Response(body=f, content_type=_CONTENT_TYPES[parsed.kind])

    def _dispatch(self, parsed: ParsedRequest) -> BinaryIO:
        """Call the operation for a parsed request (blocking)."""
        if parsed.kind is RequestKind.LIST:
            return self._ops.list(parsed.module_path)
        if parsed.kind is RequestKind.LATEST:
            return self._ops.latest(parsed.module_path)
        if parsed.kind is RequestKind.INFO:
            return self._ops.info(parsed.coordinate)
        if parsed.kind is RequestKind.MOD:
            return self._ops.go_mod(parsed.coordinate)
        return self._ops.zip(parsed.coordinate)

    def _error_response(
        self, parsed: ParsedRequest, exc: Exception, context: Optional[Dict[str, Any]] = None
    ) -> web.Response:
        """Map an operation failure to an HTTP response.

        Args:
            parsed: The request that failed.
            exc: Exception raised by the operation.
            context: Per-request context from ``ServerOps.new_context``.

        Returns:
            Plain-text error response.

        Raises:
            Exception: Re-raises anything outside the adapter's error taxonomy.
        """
        if isinstance(exc, InvalidPathError):
            status = 400
        elif isinstance(exc, ToolchainDecodeError):
            status = 500
        elif isinstance(exc, ToolchainError):
            text = (exc.stderr + exc.stdout).lower()
            status = 404 if any(m in text for m in _NOT_FOUND_MARKERS) else 502
        elif isinstance(exc, CoordinateMismatchError):
            status = 500
        elif isinstance(exc, FileNotFoundError):
            status = 404
        elif isinstance(exc, OSError):
            status = 500
        else:
            raise exc

        logger.warning(
            "%s %s failed (%d): %s",
            parsed.kind.value,
            parsed.coordinate,
            status,
            exc,
            extra=extra_context(context=context or None),
        )
        return web.Response(status=status, text=f"{exc}\n")

    async def start(self) -> None:
        """Start the proxy server."""
        self._app = self._create_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        site = web.TCPSite(self._runner, self._config.host, self._config.port)
        await site.start()

        logger.info(
            "Module proxy listening on http://%s:%s", self._config.host, self._config.port
        )
        logger.info("Download root: %s", self._config.download_root)

    async def stop(self) -> None:
        """Stop the proxy server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            self._app = None


def run_proxy_server_sync(config: ProxyConfig, ops: ServerOps) -> None:
    """Run the proxy server synchronously.

    Installs signal handlers for SIGTERM and SIGINT for clean shutdown.

    Args:
        config: Server configuration.
        ops: Operations answering proxy requests.
    """
    server = ModuleProxyServer(config, ops)
    loop = asyncio.new_event_loop()

    async def run():
        await server.start()
        stop_event = asyncio.Event()
        running_loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            running_loop.add_signal_handler(sig, stop_event.set)
        await stop_event.wait()
        logger.info("Shutdown signal received, stopping...")
        await server.stop()

    try:
        loop.run_until_complete(run())
    except KeyboardInterrupt:
        # Fallback for platforms where signal handlers don't work (Windows)
        loop.run_until_complete(server.stop())
    finally:
        loop.close()
        logger.info("Proxy server shutdown complete")
