"""Module coordinates and the case-folding escape used on disk and in URLs.

Module paths may contain upper-case letters, but both the download cache and
the proxy protocol must work on case-insensitive file systems. Every upper-case
letter is therefore written as ``!`` followed by its lower-case form, so
``github.com/Azure/azure-sdk`` becomes ``github.com/!azure/azure-sdk``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from constants import Constants

from .errors import InvalidPathError

LATEST = Constants.LATEST

_ELEMENT_CHARS = re.compile(r"^[A-Za-z0-9\-._~]+$")
_SHORT_NAME_SUFFIX = re.compile(r"~[0-9]+$")
_WINDOWS_RESERVED = {
    "CON", "PRN", "AUX", "NUL",
    "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
    "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9",
}


@dataclass(frozen=True)
class ModuleVersion:
    """A module path plus a version, or the ``latest`` query."""

    path: str
    version: str = LATEST

    def __str__(self) -> str:
        return f"{self.path}@{self.version or LATEST}"


def _check_element(path: str, elem: str) -> None:
    if not elem:
        raise InvalidPathError(path, "empty path element")
    if not _ELEMENT_CHARS.match(elem):
        raise InvalidPathError(path, f"invalid char in path element {elem!r}")
    if elem.startswith(".") or elem.endswith("."):
        raise InvalidPathError(path, f"leading or trailing dot in path element {elem!r}")
    if _SHORT_NAME_SUFFIX.search(elem):
        raise InvalidPathError(path, f"trailing tilde and digits in path element {elem!r}")
    short = elem.split(".", 1)[0].upper()
    if short in _WINDOWS_RESERVED:
        raise InvalidPathError(path, f"{elem!r} disallowed as path element component on Windows")


def check_path(path: str) -> None:
    """Validate a module path using import-path element rules.

    Raises:
        InvalidPathError: if the path is empty or any element is invalid.
    """
    if not path:
        raise InvalidPathError(path, "empty string")
    if path.startswith("/") or path.endswith("/"):
        raise InvalidPathError(path, "leading or trailing slash")
    for elem in path.split("/"):
        _check_element(path, elem)


def _escape(value: str) -> str:
    out = []
    for ch in value:
        if "A" <= ch <= "Z":
            out.append("!" + ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _unescape(value: str, kind: str) -> str:
    out = []
    bang = False
    for ch in value:
        if "A" <= ch <= "Z":
            raise InvalidPathError(value, "upper-case letter not escaped", kind)
        if bang:
            if not "a" <= ch <= "z":
                raise InvalidPathError(value, "invalid escape sequence", kind)
            out.append(ch.upper())
            bang = False
        elif ch == "!":
            bang = True
        else:
            out.append(ch)
    if bang:
        raise InvalidPathError(value, "dangling escape", kind)
    return "".join(out)


def escape_path(path: str) -> str:
    """Return the escaped form of a module path, validating it first."""
    check_path(path)
    return _escape(path)


def escape_version(version: str) -> str:
    """Return the escaped form of a version string."""
    if not version:
        raise InvalidPathError(version, "empty string", "version")
    if "!" in version or "/" in version:
        raise InvalidPathError(version, "disallowed character", "version")
    return _escape(version)


def unescape_path(escaped: str) -> str:
    """Invert ``escape_path``; the result is validated as a module path."""
    path = _unescape(escaped, "escaped module path")
    check_path(path)
    return path


def unescape_version(escaped: str) -> str:
    """Invert ``escape_version``."""
    version = _unescape(escaped, "escaped version")
    if not version or "/" in version:
        raise InvalidPathError(escaped, "invalid version", "escaped version")
    return version
