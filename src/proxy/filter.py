"""Allow/deny rules deciding which module paths the proxy will serve."""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from .errors import RuleLoadError

logger = logging.getLogger(__name__)


def load_rules(file_name: Optional[str]) -> List[re.Pattern[str]]:
    """Load anchored module path patterns from a rules file.

    Each non-blank line is a regular expression that must match the whole
    module path.

    Args:
        file_name: Path to the rules file. None or empty means no rules.

    Returns:
        List of compiled patterns.

    Raises:
        RuleLoadError: If the file cannot be read or a pattern does not compile.
    """
    if not file_name:
        return []

    try:
        with open(file_name, encoding="utf-8") as f:
            lines = f.read().split("\n")
    except OSError as e:
        raise RuleLoadError(f"{file_name}: {e}") from e

    rules = []
    for line in lines:
        line = line.strip()
        if not line:
            continue
        try:
            rules.append(re.compile(f"^(?:{line})$"))
        except re.error as e:
            raise RuleLoadError(f"{file_name}: bad pattern {line!r}: {e}") from e

    logger.debug("Loaded %d rules from %s", len(rules), file_name)
    return rules


class AccessFilter:
    """Predicate over module paths built from an allow list and a deny list.

    Deny rules win over allow rules. With no rules at all every path is
    accepted; that fail-open default is deliberate policy.
    """

    def __init__(
        self,
        allow_rules: Sequence[re.Pattern[str]] = (),
        deny_rules: Sequence[re.Pattern[str]] = (),
    ):
        self._allow: Tuple[re.Pattern[str], ...] = tuple(allow_rules)
        self._deny: Tuple[re.Pattern[str], ...] = tuple(deny_rules)

    @property
    def allow_rules(self) -> Tuple[re.Pattern[str], ...]:
        return self._allow

    @property
    def deny_rules(self) -> Tuple[re.Pattern[str], ...]:
        return self._deny

    def is_denied(self, path: str) -> bool:
        return any(r.fullmatch(path) for r in self._deny)

    def is_allowed(self, path: str) -> bool:
        return any(r.fullmatch(path) for r in self._allow)

    def allows(self, path: str) -> bool:
        """Return True if the module path may be served.

        The empty path matches no rule, so it is rejected only when an
        allow list exists.
        """
        if not path:
            return not self._allow
        if self._deny and self.is_denied(path):
            return False
        if self._allow and not self.is_allowed(path):
            return False
        return True
