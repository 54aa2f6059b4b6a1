"""Storage locations."""

from __future__ import annotations

import os

CONFIG_FILENAME = "ringguard_config.yml"


def ensure_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


def app_home() -> str:
    return os.environ.get("RINGGUARD_HOME") or os.path.join(
        os.path.expanduser("~"), ".ringguard"
    )


def default_paths(base_dir: str | None = None) -> dict:
    root = base_dir or app_home()
    paths = {
        "root": root,
        "config": os.path.join(root, CONFIG_FILENAME),
        "logs": os.path.join(root, "logs"),
    }
    ensure_dir(root)
    return paths


def resolve_log_dir(root: str, log_dir: str) -> str:
    """Relative log dirs in the config are relative to the app root."""
    if os.path.isabs(log_dir):
        return log_dir
    return os.path.join(root, log_dir)
