# Area: Shared
"""
ranked_turbo._config — Runner Configuration
===========================================

Defaults, loading and validation for the settlement pipeline config.
Config is a plain dict; environment variables (optionally read from a
``.env`` file) override values loaded from a JSON file.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

logger = logging.getLogger("ranked_turbo")

BOT_IDENTITY = "0"

DEFAULT_CONFIG: Dict[str, Any] = {
    "baseline": 500,
    "normal_stake": 25,
    "doubled_stake": 50,
    "settle_delay_seconds": 2.0,
    "verify_delay_seconds": 0.2,
    "start_delay_seconds": 0.2,
    "push_delay_seconds": 0.5,
    "max_player_slots": 24,
    "http_timeout_seconds": 10.0,
    "log_file": "ranked_turbo.log",
}

# Required config keys
REQUIRED_CONFIG_KEYS = [
    "store_base_url",
]

# Environment variable -> (config key, converter)
ENV_MAPPINGS = {
    "RANKED_TURBO_STORE_URL": ("store_base_url", str),
    "RANKED_TURBO_BASELINE": ("baseline", int),
    "RANKED_TURBO_HTTP_TIMEOUT": ("http_timeout_seconds", float),
    "RANKED_TURBO_LOG_FILE": ("log_file", str),
}

_NUMERIC_KEYS = (
    "baseline", "normal_stake", "doubled_stake",
    "settle_delay_seconds", "verify_delay_seconds",
    "start_delay_seconds", "push_delay_seconds",
    "max_player_slots", "http_timeout_seconds",
)


def build_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return DEFAULT_CONFIG merged with ``overrides``."""
    config = dict(DEFAULT_CONFIG)
    if overrides:
        config.update(overrides)
    return config


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load config from an optional JSON file, then apply env overrides.

    Args:
        config_path: Path to a JSON config file (missing file is ignored)

    Returns:
        The merged config dict (not yet validated)
    """
    load_dotenv()
    file_config: Dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path, encoding="utf-8") as f:
                file_config = json.load(f)
        else:
            logger.warning(f"Config file not found: {config_path}")

    config = build_config(file_config)

    for env_key, (config_key, convert) in ENV_MAPPINGS.items():
        if env_key in os.environ:
            config[config_key] = convert(os.environ[env_key])

    return config


def validate_config(config: dict) -> None:
    """
    Validate required configuration keys and numeric tunables.

    Args:
        config: Configuration dict

    Raises:
        ValueError: If required keys are missing or a tunable is invalid
    """
    missing = [k for k in REQUIRED_CONFIG_KEYS if not config.get(k)]
    if missing:
        raise ValueError(f"Missing required config keys: {missing}")

    for key in _NUMERIC_KEYS:
        value = config.get(key, DEFAULT_CONFIG[key])
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Config key '{key}' must be a number, got {value!r}")
        if key.endswith("_seconds") and value < 0:
            raise ValueError(f"Config key '{key}' must not be negative")

    if config.get("max_player_slots", DEFAULT_CONFIG["max_player_slots"]) < 1:
        raise ValueError("Config key 'max_player_slots' must be at least 1")
