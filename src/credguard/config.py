"""Project configuration for credguard.

Configuration is optional. It is read from ``credguard.toml`` or from the
``[tool.credguard]`` table of ``pyproject.toml``, whichever is found first
walking up from the working directory:

    [manifests]
    directory = ".secrets"

    [manifests.required]
    "github.env" = ["GITHUB_PAT"]

    [scan]
    exclude_dirs = ["fixtures"]
    extra_patterns = [{ label = "Internal Token", regex = "itk_[0-9a-f]{32}", severity = "high" }]

    [scan.whitelist]
    "docs/api/" = ["Email Address"]

    [audit]
    history_depth = 50

    [hooks]
    directory = ".githooks"
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from credguard.core.manifests import DEFAULT_OPTIONAL, DEFAULT_REQUIRED, ManifestSchema

CONFIG_FILENAME = "credguard.toml"

DEFAULT_EXTENSIONS: tuple[str, ...] = (
    ".py", ".js", ".mjs", ".cjs", ".ts", ".tsx", ".jsx", ".md", ".json",
    ".env", ".sh", ".yml", ".yaml", ".toml", ".ini", ".cfg", ".txt",
)
DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = (
    ".git", "node_modules", "memory", "__pycache__", ".venv", "venv",
    ".tox", ".mypy_cache", ".pytest_cache", ".ruff_cache", "dist", "build",
)
DEFAULT_EXCLUDE_FILES: tuple[str, ...] = (
    "*.log", "*.lock", "package-lock.json", "yarn.lock", "bun.lockb",
    "pnpm-lock.yaml", "poetry.lock", "uv.lock",
)
DEFAULT_RECOMMENDED_IGNORES: tuple[str, ...] = ("__pycache__/", ".venv/", "*.log", ".DS_Store")


class ConfigError(Exception):
    """Configuration file is invalid."""

    pass


class ConfigNotFoundError(ConfigError):
    """An explicitly requested configuration file does not exist."""

    pass


def _str_list(value: Any, key: str) -> list[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a list of strings")
    return list(value)


def _manifest_table(value: Any, key: str) -> dict[str, tuple[str, ...]]:
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be a table of file name -> key list")
    return {name: tuple(_str_list(keys, f"{key}.{name}")) for name, keys in value.items()}


@dataclass
class ManifestsConfig:
    """Location and schema of the credential manifests."""

    directory: str = ".secrets"
    required: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_REQUIRED))
    optional: dict[str, tuple[str, ...]] = field(default_factory=lambda: dict(DEFAULT_OPTIONAL))

    @property
    def schema(self) -> ManifestSchema:
        return ManifestSchema(required=self.required, optional=self.optional)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManifestsConfig:
        config = cls()
        if "directory" in data:
            config.directory = str(data["directory"]).rstrip("/")
        if "required" in data:
            config.required = _manifest_table(data["required"], "manifests.required")
        if "optional" in data:
            config.optional = _manifest_table(data["optional"], "manifests.optional")
        return config


@dataclass
class ScanConfig:
    """File discovery and pattern configuration for the scanner.

    Lists from the config file extend the defaults rather than replace them.
    """

    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_DIRS))
    exclude_files: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_FILES))
    whitelist: dict[str, list[str]] = field(default_factory=dict)
    extra_patterns: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanConfig:
        config = cls()
        config.extensions += _str_list(data.get("extensions", []), "scan.extensions")
        config.exclude_dirs += _str_list(data.get("exclude_dirs", []), "scan.exclude_dirs")
        config.exclude_files += _str_list(data.get("exclude_files", []), "scan.exclude_files")

        whitelist = data.get("whitelist", {})
        if not isinstance(whitelist, dict):
            raise ConfigError("'scan.whitelist' must be a table of path -> label list")
        config.whitelist = {
            path: _str_list(labels, f"scan.whitelist.{path}") for path, labels in whitelist.items()
        }

        extra = data.get("extra_patterns", [])
        if not isinstance(extra, list) or not all(isinstance(e, dict) for e in extra):
            raise ConfigError("'scan.extra_patterns' must be a list of tables")
        config.extra_patterns = list(extra)
        return config


@dataclass
class AuditConfig:
    """Auditor settings."""

    history_depth: int = 20
    recommended_ignores: list[str] = field(
        default_factory=lambda: list(DEFAULT_RECOMMENDED_IGNORES)
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AuditConfig:
        config = cls()
        depth = data.get("history_depth", config.history_depth)
        if not isinstance(depth, int) or depth < 1:
            raise ConfigError("'audit.history_depth' must be a positive integer")
        config.history_depth = depth
        if "recommended_ignores" in data:
            config.recommended_ignores = _str_list(
                data["recommended_ignores"], "audit.recommended_ignores"
            )
        return config


@dataclass
class HooksConfig:
    """Where git hooks live. ``None`` means ``<root>/.git/hooks``."""

    directory: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HooksConfig:
        directory = data.get("directory")
        return cls(directory=str(directory) if directory else None)


@dataclass
class CredguardConfig:
    """Complete credguard configuration."""

    manifests: ManifestsConfig = field(default_factory=ManifestsConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    audit: AuditConfig = field(default_factory=AuditConfig)
    hooks: HooksConfig = field(default_factory=HooksConfig)
    path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: Path | None = None) -> CredguardConfig:
        """Create config from a parsed TOML table."""
        for section in ("manifests", "scan", "audit", "hooks"):
            if not isinstance(data.get(section, {}), dict):
                raise ConfigError(f"'[{section}]' must be a table")

        return cls(
            manifests=ManifestsConfig.from_dict(data.get("manifests", {})),
            scan=ScanConfig.from_dict(data.get("scan", {})),
            audit=AuditConfig.from_dict(data.get("audit", {})),
            hooks=HooksConfig.from_dict(data.get("hooks", {})),
            path=path,
        )

    def manifest_dir(self, root: Path) -> Path:
        return root / self.manifests.directory

    def hooks_dir(self, root: Path) -> Path:
        if self.hooks.directory:
            return root / self.hooks.directory
        return root / ".git" / "hooks"


def find_config(start_dir: Path | None = None) -> Path | None:
    """Find credguard.toml, or a pyproject.toml with a [tool.credguard] table.

    Args:
        start_dir: Starting directory (defaults to cwd)

    Returns:
        Path to the config file or None if not found
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate

        pyproject = current / "pyproject.toml"
        if pyproject.is_file():
            try:
                data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
            except (OSError, tomllib.TOMLDecodeError):
                data = {}
            if "credguard" in data.get("tool", {}):
                return pyproject

        if current == current.parent:
            return None
        current = current.parent


def load_config(path: Path | None = None, start_dir: Path | None = None) -> CredguardConfig:
    """Load configuration from ``path`` or from the discovered config file.

    Returns defaults when no path is given and nothing is discovered.

    Raises:
        ConfigNotFoundError: If ``path`` is given but does not exist.
        ConfigError: If the file is not valid TOML or has invalid values.
    """
    if path is not None and not path.is_file():
        raise ConfigNotFoundError(f"Config file not found: {path}")

    config_path = path or find_config(start_dir)
    if config_path is None:
        return CredguardConfig()

    try:
        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("credguard", {})

    return CredguardConfig.from_dict(data, path=config_path)
