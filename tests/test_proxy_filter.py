"""Tests for the module path access filter."""

import re

import pytest

from proxy.errors import RuleLoadError
from proxy.filter import AccessFilter, load_rules


def _rules(*patterns):
    return [re.compile(f"^(?:{p})$") for p in patterns]


class TestAccessFilter:
    """Tests for allow/deny evaluation."""

    def test_no_rules_allows_everything(self):
        f = AccessFilter()
        assert f.allows("github.com/foo/bar") is True
        assert f.allows("") is True

    def test_deny_wins_over_allow(self):
        f = AccessFilter(
            allow_rules=_rules(r"github\.com/.*"),
            deny_rules=_rules(r"github\.com/evil/.*"),
        )
        assert f.allows("github.com/good/lib") is True
        assert f.allows("github.com/evil/lib") is False

    def test_deny_only(self):
        """With an empty allow list only the deny rules matter."""
        f = AccessFilter(deny_rules=_rules(r"example\.com/blocked"))
        assert f.allows("example.com/blocked") is False
        assert f.allows("example.com/other") is True

    def test_allow_only_rejects_unlisted(self):
        f = AccessFilter(allow_rules=_rules(r"golang\.org/x/.*"))
        assert f.allows("golang.org/x/mod") is True
        assert f.allows("github.com/foo/bar") is False

    def test_empty_path_rejected_only_with_allow_list(self):
        assert AccessFilter(deny_rules=_rules("a.*")).allows("") is True
        assert AccessFilter(allow_rules=_rules("a.*")).allows("") is False

    def test_empty_path_matches_no_rule(self):
        """Even a match-anything pattern does not match the empty path."""
        assert AccessFilter(deny_rules=_rules(".*")).allows("") is True
        assert AccessFilter(allow_rules=_rules(".*")).allows("") is False
        assert AccessFilter(allow_rules=_rules(".*"), deny_rules=_rules(".*")).allows("") is False

    def test_match_is_whole_path(self):
        f = AccessFilter(deny_rules=_rules(r"example\.com/a"))
        assert f.allows("example.com/a") is False
        assert f.allows("example.com/ab") is True
        assert f.allows("xexample.com/a") is True

    def test_rules_are_immutable_tuples(self):
        allow = _rules("a")
        f = AccessFilter(allow_rules=allow)
        allow.append(re.compile("^b$"))
        assert len(f.allow_rules) == 1
        assert f.allows("b") is False


class TestLoadRules:
    """Tests for reading rules files."""

    def test_no_file_gives_no_rules(self):
        assert load_rules(None) == []
        assert load_rules("") == []

    def test_loads_anchored_patterns(self, tmp_path):
        rules_file = tmp_path / "whitelist"
        rules_file.write_text("github\\.com/acme/.*\n\ngolang\\.org/x/mod\n", encoding="utf-8")

        rules = load_rules(str(rules_file))

        assert len(rules) == 2
        f = AccessFilter(allow_rules=rules)
        assert f.allows("github.com/acme/tool") is True
        assert f.allows("golang.org/x/mod") is True
        assert f.allows("golang.org/x/modfoo") is False

    def test_alternation_stays_anchored(self, tmp_path):
        rules_file = tmp_path / "blacklist"
        rules_file.write_text("a\\.com/x|b\\.com/y\n", encoding="utf-8")

        f = AccessFilter(deny_rules=load_rules(str(rules_file)))

        assert f.allows("a.com/x") is False
        assert f.allows("b.com/y") is False
        assert f.allows("a.com/xyz") is True

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(RuleLoadError):
            load_rules(str(tmp_path / "nope"))

    def test_bad_pattern_raises(self, tmp_path):
        rules_file = tmp_path / "bad"
        rules_file.write_text("github.com/(unclosed\n", encoding="utf-8")
        with pytest.raises(RuleLoadError):
            load_rules(str(rules_file))
