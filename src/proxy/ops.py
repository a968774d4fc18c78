"""Operations the module proxy front end dispatches to.

``ServerOps`` is the capability set the HTTP front end consumes.
``GoModuleOps`` implements it by asking the go command and serving the files
it leaves in the download cache.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, BinaryIO, Dict, Optional

from constants import FileRole

from .cache import VersionListCache
from .errors import CoordinateMismatchError
from .filter import AccessFilter
from .module import LATEST, ModuleVersion
from .toolchain import ToolchainClient

logger = logging.getLogger(__name__)


class ServerOps(ABC):
    """Operations backing the module proxy protocol.

    Every file-returning operation hands back an open binary file that the
    caller is responsible for closing.
    """

    def new_context(self, request: Any) -> Dict[str, Any]:
        """Return per-request context passed alongside each operation."""
        return {}

    @abstractmethod
    def filter(self, path: str) -> bool:
        """Return True if the module path may be served."""

    @abstractmethod
    def list(self, path: str) -> BinaryIO:
        """Newline-separated list of known versions."""

    @abstractmethod
    def latest(self, path: str) -> BinaryIO:
        """Version metadata for the latest version."""

    @abstractmethod
    def info(self, m: ModuleVersion) -> BinaryIO:
        """Version metadata (.info)."""

    @abstractmethod
    def go_mod(self, m: ModuleVersion) -> BinaryIO:
        """go.mod file (.mod)."""

    @abstractmethod
    def zip(self, m: ModuleVersion) -> BinaryIO:
        """Module source archive (.zip)."""


class GoModuleOps(ServerOps):
    """ServerOps implementation delegating to a ToolchainClient."""

    def __init__(
        self,
        toolchain: ToolchainClient,
        list_cache: VersionListCache,
        access_filter: Optional[AccessFilter] = None,
    ):
        """Initialize the operations object.

        Args:
            toolchain: Client used to resolve and download modules.
            list_cache: Version list cache rooted in the download cache.
            access_filter: Allow/deny rules. None accepts every path.
        """
        self._toolchain = toolchain
        self._list_cache = list_cache
        self._filter = access_filter or AccessFilter()

    @property
    def list_cache(self) -> VersionListCache:
        return self._list_cache

    def filter(self, path: str) -> bool:
        allowed = self._filter.allows(path)
        if not allowed:
            logger.info("Filtered: %s", path)
        return allowed

    def list(self, path: str) -> BinaryIO:
        cached = self._list_cache.lookup(path)
        if cached is not None:
            return cached

        listed = self._toolchain.list_versions(path)
        if listed.path != path:
            raise CoordinateMismatchError(path, listed.path)
        return self._list_cache.store(path, listed.versions)

    def latest(self, path: str) -> BinaryIO:
        return self._open(ModuleVersion(path, LATEST), FileRole.INFO)

    def info(self, m: ModuleVersion) -> BinaryIO:
        return self._open(m, FileRole.INFO)

    def go_mod(self, m: ModuleVersion) -> BinaryIO:
        return self._open(m, FileRole.MOD)

    def zip(self, m: ModuleVersion) -> BinaryIO:
        return self._open(m, FileRole.ZIP)

    def _open(self, m: ModuleVersion, role: FileRole) -> BinaryIO:
        if not m.version:
            m = ModuleVersion(m.path, LATEST)
        result = self._toolchain.resolve(m)
        return open(result.file_for(role), "rb")
