"""Exception types raised by the module proxy adapter."""

from __future__ import annotations

from typing import Sequence


class ModuleProxyError(Exception):
    """Base class for adapter errors."""


class InvalidPathError(ModuleProxyError):
    """A module path or version is malformed or cannot be escaped."""

    def __init__(self, value: str, reason: str, kind: str = "module path"):
        self.value = value
        self.reason = reason
        super().__init__(f"malformed {kind} {value!r}: {reason}")


class RuleLoadError(ModuleProxyError):
    """An access rules file could not be read or compiled."""


class ToolchainError(ModuleProxyError):
    """The go command exited unsuccessfully.

    The message embeds the command line and the captured stderr and stdout.
    """

    def __init__(
        self,
        command: Sequence[str],
        stderr: str = "",
        stdout: str = "",
        returncode: int = -1,
        message: str = "",
    ):
        self.command = list(command)
        self.stderr = stderr
        self.stdout = stdout
        self.returncode = returncode
        super().__init__(message or f"{self.command_line}:\n{stderr}{stdout}")

    @property
    def command_line(self) -> str:
        return " ".join(self.command)


class ToolchainDecodeError(ToolchainError):
    """The go command succeeded but its JSON output could not be decoded."""


class CoordinateMismatchError(ModuleProxyError):
    """The go command resolved a different module path than was requested."""

    def __init__(self, requested: str, resolved: str):
        self.requested = requested
        self.resolved = resolved
        super().__init__(f"go list -m: asked for {requested} but got {resolved}")
