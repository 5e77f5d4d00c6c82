"""Configuration loader for aipolish."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

log = logging.getLogger(__name__)

DEFAULT_INSTRUCTION = "improve readability"

DEFAULTS: dict = {
    "log_level": "warning",
    "instruction": DEFAULT_INSTRUCTION,
    "openai": {
        "model": "gpt-4",
        "base_url": "https://api.openai.com",
        "temperature": 0.7,
        "max_output_tokens": 1000,
        "token_budget": 8192,
        # Seconds; null disables the timeout entirely.
        "timeout": 120.0,
        # "keyring" means: look the key up in the system keyring.
        "api_key": "keyring",
    },
}


def resolve_home() -> Path:
    """Resolve AIPOLISH_HOME: env var > default ~/.aipolish."""
    env_home = os.environ.get("AIPOLISH_HOME")
    if env_home:
        return Path(env_home).expanduser().resolve()
    return Path("~/.aipolish").expanduser().resolve()


def config_path(home: Path | None = None) -> Path:
    """Return the path to config.yaml."""
    if home is None:
        home = resolve_home()
    return home / "config.yaml"


def load_config(path: Path | None = None) -> dict:
    """Load config.yaml and merge with defaults.

    Args:
        path: Explicit path to config.yaml. If None, uses default location.

    Returns:
        Merged configuration dict.
    """
    if path is None:
        path = config_path()

    user_config: dict = {}
    if path.exists():
        try:
            raw = path.read_text(encoding="utf-8")
            user_config = yaml.safe_load(raw) or {}
        except (OSError, yaml.YAMLError):
            log.warning("Failed to read config at %s, using defaults", path, exc_info=True)

    if not isinstance(user_config, dict):
        log.warning("Config at %s is not a mapping, using defaults", path)
        user_config = {}

    return _deep_merge(DEFAULTS, user_config)


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
