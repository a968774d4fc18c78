"""gomodgate proxy package.

This package serves the Go module proxy protocol by delegating to the local go
command. Module paths are gated by allow/deny rules, version lists are cached
on disk for a short TTL, and every request is access-logged.
"""

from .errors import (
    CoordinateMismatchError,
    InvalidPathError,
    ModuleProxyError,
    RuleLoadError,
    ToolchainDecodeError,
    ToolchainError,
)
from .module import ModuleVersion, escape_path, unescape_path
from .filter import AccessFilter, load_rules
from .cache import VersionListCache, serialize_versions
from .toolchain import DownloadResult, GoToolchain, ToolchainClient, VersionList, run_json
from .ops import GoModuleOps, ServerOps
from .request_parser import ParsedRequest, RequestKind, RequestParser
from .server import ModuleProxyServer, ProxyConfig

__all__ = [
    "AccessFilter",
    "CoordinateMismatchError",
    "DownloadResult",
    "GoModuleOps",
    "GoToolchain",
    "InvalidPathError",
    "ModuleProxyError",
    "ModuleProxyServer",
    "ModuleVersion",
    "ParsedRequest",
    "ProxyConfig",
    "RequestKind",
    "RequestParser",
    "RuleLoadError",
    "ServerOps",
    "ToolchainClient",
    "ToolchainDecodeError",
    "ToolchainError",
    "VersionList",
    "VersionListCache",
    "escape_path",
    "load_rules",
    "run_json",
    "serialize_versions",
    "unescape_path",
]
