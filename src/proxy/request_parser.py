"""Request parser for the Go module proxy URL grammar.

Supported targets (module paths and versions are case-escaped):

    /{module}/@v/list
    /{module}/@latest
    /{module}/@v/{version}.info
    /{module}/@v/{version}.mod
    /{module}/@v/{version}.zip
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .module import LATEST, ModuleVersion, unescape_path, unescape_version


class RequestKind(Enum):
    """Operations reachable through the proxy URL grammar."""

    LIST = "list"
    LATEST = "latest"
    INFO = "info"
    MOD = "mod"
    ZIP = "zip"


_SUFFIX_KINDS = {
    ".info": RequestKind.INFO,
    ".mod": RequestKind.MOD,
    ".zip": RequestKind.ZIP,
}


@dataclass
class ParsedRequest:
    """Result of parsing a module proxy request path."""

    kind: RequestKind
    module_path: str
    version: str = LATEST
    raw_path: str = ""

    @property
    def coordinate(self) -> ModuleVersion:
        return ModuleVersion(self.module_path, self.version)


class RequestParser:
    """Parser for module proxy request paths."""

    _LATEST_SUFFIX = "/@latest"
    _VERSION_MARKER = "/@v/"

    def parse(self, path: str) -> Optional[ParsedRequest]:
        """Parse a request path.

        Args:
            path: The decoded URL path.

        Returns:
            ParsedRequest, or None if the path is not part of the grammar.

        Raises:
            InvalidPathError: If the module path or version cannot be unescaped.
        """
        raw_path = path
        path = "/" + path.lstrip("/")

        if path.endswith(self._LATEST_SUFFIX):
            escaped_module = path[1: -len(self._LATEST_SUFFIX)]
            return ParsedRequest(
                kind=RequestKind.LATEST,
                module_path=unescape_path(escaped_module),
                raw_path=raw_path,
            )

        idx = path.find(self._VERSION_MARKER)
        if idx < 0:
            return None
        escaped_module = path[1:idx]
        rest = path[idx + len(self._VERSION_MARKER):]

        if rest == "list":
            return ParsedRequest(
                kind=RequestKind.LIST,
                module_path=unescape_path(escaped_module),
                raw_path=raw_path,
            )

        for suffix, kind in _SUFFIX_KINDS.items():
            if rest.endswith(suffix) and len(rest) > len(suffix):
                return ParsedRequest(
                    kind=kind,
                    module_path=unescape_path(escaped_module),
                    version=unescape_version(rest[: -len(suffix)]),
                    raw_path=raw_path,
                )

        return None
