"""Built-in credential patterns.

The catalog is an ordered tuple of compiled patterns. Order only affects how
findings are grouped within a file, never whether something is detected.
Severity is not part of a pattern: it comes from ``SEVERITY_BY_LABEL`` so the
same label always maps to the same severity.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from credguard.scanner.base import FindingSeverity


class CatalogError(Exception):
    """A catalog entry could not be compiled."""

    pass


@dataclass(frozen=True)
class CredentialPattern:
    """A regex describing one secret shape.

    Attributes:
        label: Human-readable label, also the key into the severity table.
        pattern: Compiled regex. The whole match is reported.
        context_sensitive: Matches are common in harmless text, so the
            whitelist applies content heuristics to them.
    """

    label: str
    pattern: re.Pattern[str]
    context_sensitive: bool = False


def credential_pattern(
    label: str, regex: str, context_sensitive: bool = False
) -> CredentialPattern:
    """Compile a catalog entry.

    Raises:
        CatalogError: If ``regex`` is not a valid regular expression or the
            label is empty.
    """
    if not label or not label.strip():
        raise CatalogError(f"Pattern {regex!r} has an empty label")
    try:
        compiled = re.compile(regex)
    except re.error as e:
        raise CatalogError(f"Invalid regex for {label!r}: {e}") from e
    return CredentialPattern(label=label, pattern=compiled, context_sensitive=context_sensitive)


OPENAI_API_KEY = "OpenAI API Key"
BROWSER_USE_API_KEY = "Browser-Use API Key"
GITHUB_PAT = "GitHub Personal Access Token"
AGENTMAIL_API_KEY = "Agentmail API Key"
SLACK_BOT_TOKEN = "Slack Bot Token"
AWS_ACCESS_KEY = "AWS Access Key"
GOOGLE_API_KEY = "Google API Key"
HARDCODED_PASSWORD = "Hardcoded Password"
HARDCODED_SECRET = "Hardcoded Secret/Token"
LONG_SUSPICIOUS_STRING = "Long Suspicious String"
EMAIL_ADDRESS = "Email Address"
MONGODB_URI = "MongoDB Connection String"
POSTGRES_URI = "PostgreSQL Connection String"
MYSQL_URI = "MySQL Connection String"


DEFAULT_CATALOG: tuple[CredentialPattern, ...] = (
    # Provider API keys
    credential_pattern(OPENAI_API_KEY, r"sk-[a-zA-Z0-9]{48}"),
    credential_pattern(BROWSER_USE_API_KEY, r"bu_[a-zA-Z0-9_]{30,}"),
    credential_pattern(GITHUB_PAT, r"ghp_[a-zA-Z0-9]{36}"),
    credential_pattern(AGENTMAIL_API_KEY, r"am_[a-fA-F0-9]{64}"),
    credential_pattern(SLACK_BOT_TOKEN, r"xoxb-[0-9]{13}-[0-9]{13}-[a-zA-Z0-9]{24}"),
    credential_pattern(AWS_ACCESS_KEY, r"AKIA[0-9A-Z]{16}"),
    credential_pattern(GOOGLE_API_KEY, r"AIza[0-9A-Za-z\-_]{35}"),
    # Key/value assignments
    credential_pattern(
        HARDCODED_PASSWORD,
        r"""(password|pwd|passwd)["'\s]*[:=]["'\s]*["'][^"']{8,}["']""",
    ),
    credential_pattern(
        HARDCODED_SECRET,
        r"""(secret|token)["'\s]*[:=]["'\s]*["'][^"']{10,}["']""",
    ),
    credential_pattern(LONG_SUSPICIOUS_STRING, r"""["'][a-zA-Z0-9]{32,}["']""", True),
    credential_pattern(
        EMAIL_ADDRESS, r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}", True
    ),
    # Connection strings
    credential_pattern(MONGODB_URI, r"""mongodb://[^"'\s]+"""),
    credential_pattern(POSTGRES_URI, r"""postgres://[^"'\s]+"""),
    credential_pattern(MYSQL_URI, r"""mysql://[^"'\s]+"""),
)

SEVERITY_BY_LABEL: dict[str, FindingSeverity] = {
    OPENAI_API_KEY: FindingSeverity.CRITICAL,
    BROWSER_USE_API_KEY: FindingSeverity.CRITICAL,
    GITHUB_PAT: FindingSeverity.CRITICAL,
    AGENTMAIL_API_KEY: FindingSeverity.CRITICAL,
    HARDCODED_PASSWORD: FindingSeverity.CRITICAL,
    SLACK_BOT_TOKEN: FindingSeverity.HIGH,
    AWS_ACCESS_KEY: FindingSeverity.HIGH,
    GOOGLE_API_KEY: FindingSeverity.HIGH,
    HARDCODED_SECRET: FindingSeverity.HIGH,
}


def severity_for(
    label: str, overrides: Mapping[str, FindingSeverity] | None = None
) -> FindingSeverity:
    """Look up the severity for a pattern label; unknown labels are MEDIUM."""
    if overrides and label in overrides:
        return overrides[label]
    return SEVERITY_BY_LABEL.get(label, FindingSeverity.MEDIUM)


def build_catalog(
    extra: Iterable[Mapping[str, object]] = (),
) -> tuple[tuple[CredentialPattern, ...], dict[str, FindingSeverity]]:
    """Return the default catalog extended with user-defined patterns.

    Each extra entry needs ``label`` and ``regex`` and may set ``severity``
    and ``context_sensitive``.

    Returns:
        The catalog and the severity overrides for the extra labels.

    Raises:
        CatalogError: If any extra entry is malformed.
    """
    patterns = list(DEFAULT_CATALOG)
    overrides: dict[str, FindingSeverity] = {}

    for entry in extra:
        label = entry.get("label")
        regex = entry.get("regex")
        if not isinstance(label, str) or not isinstance(regex, str):
            raise CatalogError(f"Pattern entry needs string 'label' and 'regex': {dict(entry)}")

        patterns.append(
            credential_pattern(label, regex, bool(entry.get("context_sensitive", False)))
        )

        severity = entry.get("severity")
        if severity is not None:
            try:
                overrides[label] = FindingSeverity.parse(str(severity))
            except ValueError as e:
                raise CatalogError(f"Unknown severity {severity!r} for {label!r}") from e

    return tuple(patterns), overrides


def iter_matches(
    content: str, catalog: Iterable[CredentialPattern] = DEFAULT_CATALOG
) -> Iterator[tuple[CredentialPattern, re.Match[str]]]:
    """Yield every non-overlapping match of every pattern, in catalog order."""
    for credential in catalog:
        for m in credential.pattern.finditer(content):
            yield credential, m


def match(
    content: str, catalog: Iterable[CredentialPattern] = DEFAULT_CATALOG
) -> list[tuple[CredentialPattern, str]]:
    """Find every non-overlapping match of every pattern.

    Results are in catalog order, and in position order within one pattern.
    """
    return [(credential, m.group(0)) for credential, m in iter_matches(content, catalog)]


def redact_secret(secret: str, visible_chars: int = 4) -> str:
    """Redact a secret, showing only first and last few characters.

    Args:
        secret: The secret string to redact.
        visible_chars: Number of characters to show at start and end.

    Returns:
        Redacted string like "sk-a****9xYz".
    """
    if len(secret) <= visible_chars * 2:
        return "*" * len(secret)
    hidden = len(secret) - visible_chars * 2
    return f"{secret[:visible_chars]}{'*' * hidden}{secret[-visible_chars:]}"
