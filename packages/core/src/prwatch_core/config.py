import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

import yaml

from prwatch_core.models import SessionSelection

DEFAULT_CONFIG: dict = {
    "author": None,
    "repositories": [],
    "ttl_minutes": 5,
    "fetcher": "gh",  # "gh" shells out to the GitHub CLI, "api" uses PyGithub with a token
    "store": "json",  # "json" | "sqlite" | "gist" | "noop"
    "store_path": None,  # None = default location under the config directory
    "gist_id": None,
    "session_name": "default",
    "host": "127.0.0.1",
    "port": 7192,
}

STATE_FILENAME = "state.json"


def config_directory() -> Path:
    """Return $XDG_CONFIG_HOME/prwatch, falling back to ~/.config/prwatch."""
    base = os.environ.get("XDG_CONFIG_HOME")
    root = Path(base) if base else Path.home() / ".config"
    return root / "prwatch"


def load_config(config_path: str = ".prwatch.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prwatch.yml in the current directory
      3. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "repositories": list(DEFAULT_CONFIG["repositories"])}

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # Resolve credentials and state location from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")
    state_file = os.environ.get("PRWATCH_STATE_FILE")
    if state_file:
        config["store_path"] = state_file

    return config


def session_selection(config: dict) -> SessionSelection:
    """Build the selection criteria every session created from this config shares."""
    author = config.get("author")
    if not author:
        raise ValueError("No author configured. Add 'author: <github-login>' to .prwatch.yml.")
    return SessionSelection.of(author, config.get("repositories") or [])


def refresh_ttl(config: dict) -> timedelta:
    minutes = config.get("ttl_minutes", DEFAULT_CONFIG["ttl_minutes"])
    # bool is an int subclass; `ttl_minutes: yes` is not a duration.
    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)) or minutes < 0:
        raise ValueError(f"ttl_minutes must be a non-negative number, got {minutes!r}")
    return timedelta(minutes=minutes)
