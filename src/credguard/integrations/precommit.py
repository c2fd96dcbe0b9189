"""Pre-commit framework integration for credguard.

For repositories whose git hooks are managed by pre-commit, the scanner is
registered as local hooks in ``.pre-commit-config.yaml`` instead of writing
scripts into ``.git/hooks``.
"""

from __future__ import annotations

from pathlib import Path

import yaml

PRECOMMIT_CONFIG = ".pre-commit-config.yaml"

HOOK_ID_PREFIX = "credguard-"

# Minimal hook entry for injection
HOOK_ENTRY = {
    "repo": "local",
    "hooks": [
        {
            "id": "credguard-scan",
            "name": "Scan staged files for credentials",
            "entry": "credguard scan --staged --strict",
            "language": "system",
            "pass_filenames": False,
            "stages": ["pre-commit"],
        },
        {
            "id": "credguard-scan-push",
            "name": "Scan repository for credentials",
            "entry": "credguard scan --strict",
            "language": "system",
            "pass_filenames": False,
            "stages": ["pre-push"],
        },
    ],
}

HOOK_IDS: tuple[str, ...] = tuple(hook["id"] for hook in HOOK_ENTRY["hooks"])


def find_precommit_config(start_dir: Path | None = None) -> Path | None:
    """Find .pre-commit-config.yaml in the current or parent directories.

    Args:
        start_dir: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    current = (start_dir or Path.cwd()).resolve()

    while current != current.parent:
        config_path = current / PRECOMMIT_CONFIG
        if config_path.exists():
            return config_path
        current = current.parent

    return None


def _load(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    return yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}


def _dump(config: dict, config_path: Path) -> None:
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


def _is_ours(hook: dict) -> bool:
    return str(hook.get("id", "")).startswith(HOOK_ID_PREFIX)


def install_precommit_hooks(config_path: Path) -> bool:
    """Add credguard hooks to a pre-commit config, creating it if missing.

    Args:
        config_path: Path to .pre-commit-config.yaml

    Returns:
        True if the file was changed, False if the hooks were already present
    """
    config = _load(config_path)
    repos = config.setdefault("repos", [])

    local_repo = next((repo for repo in repos if repo.get("repo") == "local"), None)
    if local_repo and any(_is_ours(hook) for hook in local_repo.get("hooks", [])):
        return False

    if local_repo:
        local_repo.setdefault("hooks", []).extend(dict(hook) for hook in HOOK_ENTRY["hooks"])
    else:
        repos.append({"repo": "local", "hooks": [dict(hook) for hook in HOOK_ENTRY["hooks"]]})

    _dump(config, config_path)
    return True


def uninstall_precommit_hooks(config_path: Path) -> bool:
    """Remove credguard hooks from a pre-commit config.

    Returns:
        True if hooks were removed
    """
    if not config_path.exists():
        return False

    config = _load(config_path)
    modified = False

    for repo in config.get("repos", []):
        if repo.get("repo") == "local":
            hooks = repo.get("hooks", [])
            kept = [hook for hook in hooks if not _is_ours(hook)]
            if len(kept) != len(hooks):
                repo["hooks"] = kept
                modified = True

    if modified:
        # Remove empty local repos
        config["repos"] = [
            repo
            for repo in config["repos"]
            if not (repo.get("repo") == "local" and not repo.get("hooks"))
        ]
        _dump(config, config_path)

    return modified


def verify_precommit_hooks(config_path: Path) -> dict[str, bool]:
    """Report which credguard hook ids are present in a pre-commit config."""
    result = {hook_id: False for hook_id in HOOK_IDS}

    for repo in _load(config_path).get("repos", []):
        if repo.get("repo") == "local":
            for hook in repo.get("hooks", []):
                if hook.get("id") in result:
                    result[hook["id"]] = True

    return result
