"""Credential scanning.

The pattern catalog and the whitelist policy are plain data; the scanner in
``credguard.scanner.engine`` applies them to files on disk.
"""

from credguard.scanner.base import FindingSeverity, ScanFinding, ScanResult
from credguard.scanner.patterns import CatalogError, CredentialPattern, DEFAULT_CATALOG
from credguard.scanner.whitelist import DEFAULT_POLICY, is_suppressed

__all__ = [
    "CatalogError",
    "CredentialPattern",
    "DEFAULT_CATALOG",
    "DEFAULT_POLICY",
    "FindingSeverity",
    "ScanFinding",
    "ScanResult",
    "is_suppressed",
]
