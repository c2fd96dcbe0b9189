"""Credential manifest parser.

Line grammar, applied to each line after stripping surrounding whitespace:

- Blank lines and lines starting with ``#`` are skipped.
- An optional ``export `` prefix is dropped.
- The rest must be ``KEY=VALUE`` with ``KEY`` matching
  ``[A-Za-z_][A-Za-z0-9_]*``; whitespace around ``=`` is ignored. Other lines
  are skipped.
- ``VALUE`` is stripped. If it is at least two characters long and starts and
  ends with the same straight quote (``"`` or ``'``), that single pair is
  removed and the entry is marked as quoted. Nothing else is unescaped.
- When a key appears more than once, the last assignment wins.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class ManifestEntry:
    """One ``KEY=VALUE`` assignment."""

    name: str
    value: str
    line_number: int
    quoted: bool
    raw_line: str

    @property
    def is_empty(self) -> bool:
        return not self.value


@dataclass
class ParsedManifest:
    """Parsed credential manifest."""

    path: Path
    entries: dict[str, ManifestEntry] = field(default_factory=dict)
    comments: list[str] = field(default_factory=list)

    def get(self, name: str) -> ManifestEntry | None:
        """Get an entry by key."""
        return self.entries.get(name)

    def values(self) -> Iterator[ManifestEntry]:
        return iter(self.entries.values())

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)


class ManifestParser:
    """Parse ``KEY=VALUE`` credential manifests."""

    LINE_PATTERN = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")

    QUOTES = ('"', "'")

    def parse(self, path: Path | str) -> ParsedManifest:
        """Parse a manifest file.

        Args:
            path: Path to the manifest

        Returns:
            ParsedManifest with parsed entries

        Raises:
            FileNotFoundError: If the file doesn't exist
            OSError: If the file can't be read
        """
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Manifest not found: {path}")

        manifest = self.parse_string(path.read_text(encoding="utf-8"))
        manifest.path = path
        return manifest

    def parse_string(self, content: str) -> ParsedManifest:
        """Parse manifest content from a string."""
        manifest = ParsedManifest(path=Path())

        for line_num, original_line in enumerate(content.splitlines(), start=1):
            line = original_line.strip()

            if not line:
                continue

            if line.startswith("#"):
                manifest.comments.append(line)
                continue

            match = self.LINE_PATTERN.match(line)
            if not match:
                continue

            key = match.group(1)
            value, quoted = self._unquote(match.group(2).strip())

            manifest.entries[key] = ManifestEntry(
                name=key,
                value=value,
                line_number=line_num,
                quoted=quoted,
                raw_line=original_line,
            )

        return manifest

    def _unquote(self, value: str) -> tuple[str, bool]:
        """Remove one pair of matching straight quotes."""
        if len(value) >= 2 and value[0] in self.QUOTES and value[-1] == value[0]:
            return value[1:-1], True
        return value, False
