"""Credential manifests, their validation and project setup."""

from credguard.core.parser import ManifestEntry, ManifestParser, ParsedManifest

__all__ = ["ManifestEntry", "ManifestParser", "ParsedManifest"]
