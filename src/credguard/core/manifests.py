"""Credential manifest schema, templates and weak-value heuristics."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from credguard.core.parser import ParsedManifest
from credguard.scanner.base import FindingSeverity

MANIFEST_SUFFIX = ".env"

DEFAULT_REQUIRED: dict[str, tuple[str, ...]] = {
    "agentmail.env": ("AGENTMAIL_API_KEY", "AGENTMAIL_FROM_EMAIL"),
    "browser-use.env": ("BROWSER_USE_API_KEY",),
    "gmail.env": ("GMAIL_EMAIL", "GMAIL_APP_PASSWORD"),
    "github.env": ("GITHUB_PAT",),
}

DEFAULT_OPTIONAL: dict[str, tuple[str, ...]] = {
    "cj-affiliate.env": ("CJ_EMAIL", "CJ_PASSWORD"),
    "strackr.env": ("STRACKR_EMAIL", "STRACKR_PASSWORD"),
    "openai.env": ("OPENAI_API_KEY",),
    "anthropic.env": ("ANTHROPIC_API_KEY",),
}

MANIFEST_TEMPLATES: dict[str, str] = {
    "agentmail.env": (
        "# Agentmail API credentials\n"
        "AGENTMAIL_API_KEY=your_api_key_here\n"
        "AGENTMAIL_FROM_EMAIL=your_email@agentmail.to\n"
    ),
    "browser-use.env": (
        "# Browser-Use API credentials\n"
        "BROWSER_USE_API_KEY=bu_your_api_key_here\n"
    ),
    "gmail.env": (
        "# Gmail app password\n"
        "GMAIL_EMAIL=your_email@gmail.com\n"
        "GMAIL_APP_PASSWORD=your_app_password_here\n"
    ),
    "github.env": (
        "# GitHub personal access token\n"
        "GITHUB_PAT=ghp_your_token_here\n"
    ),
}

# Values shorter than this count as missing.
MIN_VALUE_LENGTH = 3
MIN_PASSWORD_LENGTH = 8
MIN_KEY_LENGTH = 20

PLACEHOLDER_MARKERS: tuple[str, ...] = ("your_", "placeholder", "replace_me")
REPEATED_X = re.compile(r"x{4,}", re.IGNORECASE)
WEAK_VALUES: frozenset[str] = frozenset(
    {"password", "password1", "password123", "admin", "admin123", "changeme", "letmein", "123456"}
)


@dataclass(frozen=True)
class ManifestSchema:
    """Which manifest files must exist and which keys each must define."""

    required: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_REQUIRED))
    optional: Mapping[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_OPTIONAL))


DEFAULT_SCHEMA = ManifestSchema()


def template_for(manifest_name: str, keys: tuple[str, ...]) -> str:
    """Return placeholder content for a manifest, generic when no template exists."""
    if manifest_name in MANIFEST_TEMPLATES:
        return MANIFEST_TEMPLATES[manifest_name]
    stem = manifest_name.removesuffix(MANIFEST_SUFFIX)
    lines = [f"# {stem} credentials"]
    lines.extend(f"{key}=your_{key.lower()}_here" for key in keys)
    return "\n".join(lines) + "\n"


def missing_keys(manifest: ParsedManifest, keys: tuple[str, ...]) -> list[str]:
    """Keys that are absent or whose value is too short to be real."""
    missing = []
    for key in keys:
        entry = manifest.get(key)
        if entry is None or len(entry.value) < MIN_VALUE_LENGTH:
            missing.append(key)
    return missing


@dataclass(frozen=True)
class WeakValue:
    """A value that is present but looks weak, fake or malformed."""

    kind: str
    key: str
    severity: FindingSeverity
    message: str


def find_weak_values(manifest_name: str, manifest: ParsedManifest) -> list[WeakValue]:
    """Apply the weak-value heuristics to every entry of a manifest.

    Kinds:
        placeholder: template or filler value (MEDIUM)
        weak: well-known weak value (HIGH)
        short-password: password-named key under 8 characters (MEDIUM)
        short-key: key-named key under 20 characters (LOW)
        unquoted-whitespace: unquoted value containing whitespace (LOW)
    """
    issues: list[WeakValue] = []

    for entry in manifest.values():
        key, value = entry.name, entry.value
        lowered_key = key.lower()
        lowered_value = value.lower()

        if any(marker in lowered_value for marker in PLACEHOLDER_MARKERS) or REPEATED_X.search(
            value
        ):
            issues.append(
                WeakValue(
                    "placeholder",
                    key,
                    FindingSeverity.MEDIUM,
                    f"{manifest_name}: {key} appears to contain placeholder value",
                )
            )
        elif lowered_value in WEAK_VALUES:
            issues.append(
                WeakValue(
                    "weak",
                    key,
                    FindingSeverity.HIGH,
                    f"{manifest_name}: {key} uses a well-known weak value",
                )
            )

        if "password" in lowered_key and len(value) < MIN_PASSWORD_LENGTH:
            issues.append(
                WeakValue(
                    "short-password",
                    key,
                    FindingSeverity.MEDIUM,
                    f"{manifest_name}: {key} is suspiciously short for a password",
                )
            )

        if "key" in lowered_key and len(value) < MIN_KEY_LENGTH:
            issues.append(
                WeakValue(
                    "short-key",
                    key,
                    FindingSeverity.LOW,
                    f"{manifest_name}: {key} is suspiciously short for an API key",
                )
            )

        if not entry.quoted and any(ch.isspace() for ch in value):
            issues.append(
                WeakValue(
                    "unquoted-whitespace",
                    key,
                    FindingSeverity.LOW,
                    f"{manifest_name}: {key} has an unquoted value containing whitespace",
                )
            )

    return issues
