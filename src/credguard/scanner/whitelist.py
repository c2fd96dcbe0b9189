"""Whitelist policy: when a pattern match is not a finding.

Suppression is a single ordered table of predicates. A match is suppressed if
any predicate accepts it; the order only decides which rule name is reported
by :func:`suppressing_rule`. Rules never un-suppress, so a path rule and a
content heuristic that both accept a match agree by construction.

Order:
1. Static path table (``WhitelistRule``), built-in entries first, then
   entries from configuration.
2. Documentation and test paths, for hardcoded password/secret labels.
3. Service identity and documentation paths, for email addresses.
4. Example and SCM addresses in the matched text, for email addresses.
5. Package manifests and lock artifacts, for long suspicious strings.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path

from credguard.scanner.patterns import (
    BROWSER_USE_API_KEY,
    EMAIL_ADDRESS,
    HARDCODED_PASSWORD,
    HARDCODED_SECRET,
    LONG_SUSPICIOUS_STRING,
)


@dataclass(frozen=True)
class WhitelistRule:
    """Allow some labels in any file whose path contains a substring."""

    path_substring: str
    allowed_labels: frozenset[str]

    def applies(self, file_path: str, label: str) -> bool:
        return self.path_substring in file_path and label in self.allowed_labels


def _rule(path_substring: str, *labels: str) -> WhitelistRule:
    return WhitelistRule(path_substring, frozenset(labels))


_DOC_LABELS = (EMAIL_ADDRESS, LONG_SUSPICIOUS_STRING, HARDCODED_PASSWORD, HARDCODED_SECRET)

DEFAULT_WHITELIST: tuple[WhitelistRule, ...] = (
    _rule("SECURITY_CHECKLIST.md", *_DOC_LABELS),
    _rule("SECURITY.md", *_DOC_LABELS),
    _rule("SKILL.md", EMAIL_ADDRESS, HARDCODED_PASSWORD, HARDCODED_SECRET),
    _rule("TOOLS.md", EMAIL_ADDRESS),
    _rule("IDENTITY.md", EMAIL_ADDRESS),
    _rule("BROWSER_USE_SETUP.md", BROWSER_USE_API_KEY),
    _rule("send-email", EMAIL_ADDRESS),
    _rule("package.json", EMAIL_ADDRESS),
    _rule("examples/", EMAIL_ADDRESS),
    _rule(".test.", HARDCODED_SECRET, HARDCODED_PASSWORD),
    _rule("test/", HARDCODED_SECRET, HARDCODED_PASSWORD),
    _rule("tests/", HARDCODED_SECRET, HARDCODED_PASSWORD),
)


# (file_path, label, matched_text) -> suppress?
Predicate = Callable[[str, str, str], bool]


@dataclass(frozen=True)
class SuppressionRule:
    """One entry of the ordered suppression table.

    Attributes:
        name: Stable identifier, reported when the rule fires.
        labels: Labels the rule applies to, or None for every label.
        predicate: Decides whether a match is suppressed.
    """

    name: str
    labels: frozenset[str] | None
    predicate: Predicate

    def accepts(self, file_path: str, label: str, matched_text: str) -> bool:
        if self.labels is not None and label not in self.labels:
            return False
        return self.predicate(file_path, label, matched_text)


def _contains_any(haystack: str, needles: Iterable[str]) -> bool:
    return any(needle in haystack for needle in needles)


def _is_doc_example_or_test(file_path: str, _label: str, _text: str) -> bool:
    if _contains_any(file_path, ("SECURITY", "README")):
        return True
    if ".md" in file_path and _contains_any(file_path, ("example", "template")):
        return True
    return _contains_any(file_path, ("test", "spec"))


def _is_identity_or_doc_path(file_path: str, _label: str, _text: str) -> bool:
    return _contains_any(
        file_path, ("IDENTITY", "package.json", "send-email", "TOOLS", "setup", "README")
    )


def _is_example_address(_file_path: str, _label: str, text: str) -> bool:
    return _contains_any(
        text, ("example.com", "user@", "test@", "git@github.com", "git@gitlab.com")
    )


def _is_package_artifact(file_path: str, _label: str, _text: str) -> bool:
    return _contains_any(file_path, ("package", "lock", ".json"))


def _path_table_rule(rules: tuple[WhitelistRule, ...]) -> SuppressionRule:
    return SuppressionRule(
        name="path-table",
        labels=None,
        predicate=lambda file_path, label, _text: any(
            rule.applies(file_path, label) for rule in rules
        ),
    )


def whitelist_from_mapping(mapping: Mapping[str, Iterable[str]]) -> tuple[WhitelistRule, ...]:
    """Build whitelist rules from a ``{path_substring: [labels]}`` mapping."""
    return tuple(_rule(path, *labels) for path, labels in mapping.items())


def build_policy(extra_rules: Iterable[WhitelistRule] = ()) -> tuple[SuppressionRule, ...]:
    """Return the ordered suppression table, with extra path rules appended
    to the built-in path table."""
    table = DEFAULT_WHITELIST + tuple(extra_rules)
    return (
        _path_table_rule(table),
        SuppressionRule(
            "doc-or-test-path",
            frozenset({HARDCODED_PASSWORD, HARDCODED_SECRET}),
            _is_doc_example_or_test,
        ),
        SuppressionRule("identity-path", frozenset({EMAIL_ADDRESS}), _is_identity_or_doc_path),
        SuppressionRule("example-address", frozenset({EMAIL_ADDRESS}), _is_example_address),
        SuppressionRule(
            "package-artifact", frozenset({LONG_SUSPICIOUS_STRING}), _is_package_artifact
        ),
    )


DEFAULT_POLICY: tuple[SuppressionRule, ...] = build_policy()


def _normalize(file_path: Path | str) -> str:
    return file_path.as_posix() if isinstance(file_path, Path) else file_path


def suppressing_rule(
    file_path: Path | str,
    label: str,
    matched_text: str,
    policy: Iterable[SuppressionRule] = DEFAULT_POLICY,
) -> str | None:
    """Return the name of the first rule that suppresses the match, if any."""
    path = _normalize(file_path)
    for rule in policy:
        if rule.accepts(path, label, matched_text):
            return rule.name
    return None


def is_suppressed(
    file_path: Path | str,
    label: str,
    matched_text: str,
    policy: Iterable[SuppressionRule] = DEFAULT_POLICY,
) -> bool:
    """Whether a match of ``label`` in ``file_path`` should not be reported."""
    return suppressing_rule(file_path, label, matched_text, policy) is not None
