"""Access to the go command.

``run_json`` is the single place that spawns the go command. ``GoToolchain``
wraps it behind the narrow ``ToolchainClient`` interface so the adapter can be
exercised with a fake client in tests.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from constants import Constants, FileRole
from common.logging_utils import Timer, extra_context, is_debug_enabled

from .errors import ToolchainDecodeError, ToolchainError
from .module import LATEST, ModuleVersion

logger = logging.getLogger(__name__)


def run_json(command: Sequence[str], env: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Run a command and decode its standard output as a JSON object.

    Args:
        command: Program and arguments.
        env: Optional full environment for the child process.

    Returns:
        The decoded JSON object.

    Raises:
        ToolchainError: If the command cannot be started or exits non-zero.
        ToolchainDecodeError: If standard output is not a JSON object.
    """
    command = list(command)
    cmdline = " ".join(command)
    with Timer() as t:
        try:
            result = subprocess.run(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                env=dict(env) if env is not None else None,
                check=False,
            )
        except OSError as e:
            raise ToolchainError(command, stderr=str(e), message=f"{cmdline}: {e}") from e

    if is_debug_enabled(logger):
        logger.debug(
            "Toolchain command finished",
            extra=extra_context(
                event="toolchain_exec",
                component="toolchain",
                action=cmdline,
                return_code=result.returncode,
                duration_ms=t.duration_ms(),
            ),
        )

    if result.returncode != 0:
        raise ToolchainError(
            command,
            stderr=result.stderr,
            stdout=result.stdout,
            returncode=result.returncode,
        )

    try:
        decoded = json.loads(result.stdout)
    except ValueError as e:
        raise ToolchainDecodeError(
            command,
            stderr=result.stderr,
            stdout=result.stdout,
            returncode=result.returncode,
            message=f"{cmdline}: reading json: {e}",
        ) from e
    if not isinstance(decoded, dict):
        raise ToolchainDecodeError(
            command,
            stdout=result.stdout,
            returncode=result.returncode,
            message=f"{cmdline}: reading json: expected an object, got {type(decoded).__name__}",
        )
    return decoded


@dataclass
class DownloadResult:
    """Local files the go command produced for one module version."""

    path: str = ""
    version: str = ""
    info: str = ""
    go_mod: str = ""
    zip: str = ""
    dir: str = ""
    sum: str = ""
    go_mod_sum: str = ""

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "DownloadResult":
        """Build from ``go mod download -json`` output."""
        return cls(
            path=data.get("Path", ""),
            version=data.get("Version", ""),
            info=data.get("Info", ""),
            go_mod=data.get("GoMod", ""),
            zip=data.get("Zip", ""),
            dir=data.get("Dir", ""),
            sum=data.get("Sum", ""),
            go_mod_sum=data.get("GoModSum", ""),
        )

    def file_for(self, role: FileRole) -> str:
        """Return the local file path for a role."""
        files = {
            FileRole.INFO: self.info,
            FileRole.MOD: self.go_mod,
            FileRole.ZIP: self.zip,
        }
        return files[role]


@dataclass
class VersionList:
    """Known versions of a module as reported by ``go list -m -versions``."""

    path: str
    versions: List[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "VersionList":
        return cls(path=data.get("Path", ""), versions=list(data.get("Versions") or []))


class ToolchainClient(ABC):
    """Resolution operations the adapter needs from the toolchain."""

    @abstractmethod
    def resolve(self, coordinate: ModuleVersion) -> DownloadResult:
        """Download a module version and report where its files live."""

    @abstractmethod
    def list_versions(self, module_path: str) -> VersionList:
        """List the known versions of a module."""


class GoToolchain(ToolchainClient):
    """ToolchainClient backed by the go command."""

    def __init__(
        self,
        go_binary: str = Constants.DEFAULT_GO_BINARY,
        env: Optional[Mapping[str, str]] = None,
    ):
        """Initialize the client.

        Args:
            go_binary: Name or path of the go executable.
            env: Environment for child processes; None inherits os.environ.
        """
        self._go = go_binary
        self._env = env

    def _run(self, *args: str) -> Dict[str, Any]:
        return run_json([self._go, *args], env=self._env)

    def resolve(self, coordinate: ModuleVersion) -> DownloadResult:
        data = self._run("mod", "download", "-json", str(coordinate))
        return DownloadResult.from_json(data)

    def list_versions(self, module_path: str) -> VersionList:
        data = self._run(
            "list", "-m", "-json", "-versions", str(ModuleVersion(module_path, LATEST))
        )
        return VersionList.from_json(data)

    def gopath(self) -> str:
        """Return the first GOPATH entry reported by ``go env``.

        Raises:
            ToolchainError: If go fails or reports no GOPATH.
        """
        command = [self._go, "env", "-json", "GOPATH"]
        data = run_json(command, env=self._env)
        entries = (data.get("GOPATH") or "").split(os.pathsep)
        if not entries or not entries[0]:
            raise ToolchainError(command, message="missing $GOPATH")
        return entries[0]
