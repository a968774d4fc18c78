"""File-backed TTL cache for module version lists.

The version list for a module is stored next to the go command's own download
cache, at ``<root>/<escaped-module-path>/@v/listproxy``. The file's mtime is
the only freshness signal.
"""

from __future__ import annotations

import logging
import os
import tempfile
import time
from typing import Any, BinaryIO, Dict, Iterable, Optional

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled

from .module import escape_path

logger = logging.getLogger(__name__)


def serialize_versions(versions: Iterable[str]) -> bytes:
    """Join versions one per line with a trailing newline.

    An empty list serializes to no bytes at all rather than a lone newline.
    """
    data = ("\n".join(versions) + "\n").encode("utf-8")
    if data == b"\n":
        return b""
    return data


class VersionListCache:
    """TTL cache of version lists kept as files under a root directory."""

    def __init__(self, root: str, ttl: float = Constants.LIST_EXPIRE_SEC):
        """Initialize the cache.

        Args:
            root: Directory holding the go download cache.
            ttl: Seconds a stored list is trusted without asking the go command.
        """
        self._root = root
        self._ttl = ttl
        self._hits = 0
        self._misses = 0

    @property
    def root(self) -> str:
        return self._root

    @property
    def ttl(self) -> float:
        return self._ttl

    def path_for(self, module_path: str) -> str:
        """Return the cache file path for a module."""
        escaped = escape_path(module_path)
        return os.path.join(self._root, escaped, "@v", Constants.LIST_CACHE_FILE)

    def lookup(self, module_path: str) -> Optional[BinaryIO]:
        """Open the cached list if it is younger than the TTL.

        Returns:
            An open binary file, or None on a miss or an expired entry.
        """
        file_name = self.path_for(module_path)
        try:
            mtime = os.stat(file_name).st_mtime
        except FileNotFoundError:
            self._misses += 1
            return None

        age = time.time() - mtime
        if age >= self._ttl:
            self._misses += 1
            if is_debug_enabled(logger):
                logger.debug(
                    "Version list expired",
                    extra=extra_context(
                        event="cache_expired",
                        component="list_cache",
                        target=module_path,
                        age_sec=round(age, 3),
                    ),
                )
            return None

        self._hits += 1
        return open(file_name, "rb")

    def store(self, module_path: str, versions: Iterable[str]) -> BinaryIO:
        """Replace the cached list for a module and return it opened.

        The content is written to a temporary file in the same directory and
        renamed into place, so readers never observe a partial list.
        """
        file_name = self.path_for(module_path)
        data = serialize_versions(versions)

        directory = os.path.dirname(file_name)
        os.makedirs(directory, mode=Constants.CACHE_DIR_MODE, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=".listproxy-", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, file_name)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("Failed to remove temp file: %s", tmp_name)
            raise

        logger.debug("Stored %d bytes of versions for %s", len(data), module_path)
        return open(file_name, "rb")

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "root": self._root,
            "ttl": self._ttl,
            "hits": self._hits,
            "misses": self._misses,
        }
