# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Runtime configuration.

Values resolve in this order: explicit override (CLI option), environment
(``.env`` is loaded first), ``~/.ghprs/config.json``, built-in default.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from ghprs.classes import DuplicatePolicy
from ghprs.constants import DEFAULT_FIRST_PR_YEAR, DEFAULT_ORG

logger = logging.getLogger(__name__)

GHPRS_DIR = Path.home() / '.ghprs'
CONFIG_FILE = GHPRS_DIR / 'config.json'
DEFAULT_DB_PATH = GHPRS_DIR / 'db.json'

TOKEN_ENV_VARS = ('GITHUB_PAT', 'GITHUB_TOKEN', 'API_KEY')

# config.json key -> environment variable
CONFIG_ENV_VARS = {
    'org': 'GHPRS_ORG',
    'first_pr_year': 'GHPRS_FIRST_PR_YEAR',
    'db_path': 'GHPRS_DB_PATH',
    'duplicate_policy': 'GHPRS_DUPLICATE_POLICY',
    'log_level': 'GHPRS_LOG_LEVEL',
    'log_dir': 'GHPRS_LOG_DIR',
}
CONFIG_KEYS = sorted(CONFIG_ENV_VARS)


@dataclass
class Settings:
    """Resolved settings for one invocation"""

    token: Optional[str]
    org: str = DEFAULT_ORG
    first_pr_year: int = DEFAULT_FIRST_PR_YEAR
    db_path: Path = DEFAULT_DB_PATH
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.APPEND
    log_level: str = 'WARNING'
    log_dir: Optional[str] = None


def load_config(config_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load the user config file, or an empty dict if missing or unreadable."""
    config_file = config_file or CONFIG_FILE
    if not config_file.exists():
        return {}
    try:
        with open(config_file, 'r') as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError) as e:
        logger.warning(f"Ignoring unreadable config file {config_file}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {config_file}: expected a JSON object")
        return {}
    return data


def save_config(config: Dict[str, Any], config_file: Optional[Path] = None) -> None:
    """Write the user config file, creating its directory."""
    config_file = config_file or CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)
    with open(config_file, 'w') as f:
        json.dump(config, f, indent=2)


def get_token() -> Optional[str]:
    for name in TOKEN_ENV_VARS:
        value = os.getenv(name)
        if value:
            return value
    return None


def parse_duplicate_policy(value: Any) -> DuplicatePolicy:
    if isinstance(value, DuplicatePolicy):
        return value
    try:
        return DuplicatePolicy(str(value).lower())
    except ValueError:
        valid = ', '.join(p.value for p in DuplicatePolicy)
        raise ValueError(f"Invalid duplicate policy '{value}' (valid: {valid})")


def load_settings(
    overrides: Optional[Dict[str, Any]] = None,
    config_file: Optional[Path] = None,
    dotenv: bool = True,
) -> Settings:
    """Resolve settings from overrides, environment, config file and defaults.

    Args:
        overrides: Values given explicitly (None values are ignored).
        config_file: Path of the JSON config file (default ~/.ghprs/config.json).
        dotenv: Load a ``.env`` file into the environment first.

    Returns:
        Settings: The resolved settings.

    Raises:
        ValueError: If a value cannot be converted (year, policy).
    """
    if dotenv:
        load_dotenv()

    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}
    file_config = load_config(config_file)

    def resolve(key: str, default: Any) -> Any:
        if key in overrides:
            return overrides[key]
        env_value = os.getenv(CONFIG_ENV_VARS[key])
        if env_value:
            return env_value
        return file_config.get(key, default)

    try:
        first_pr_year = int(resolve('first_pr_year', DEFAULT_FIRST_PR_YEAR))
    except (TypeError, ValueError):
        raise ValueError(f"first_pr_year must be an integer year (got {resolve('first_pr_year', None)!r})")

    return Settings(
        token=overrides.get('token') or get_token(),
        org=str(resolve('org', DEFAULT_ORG)),
        first_pr_year=first_pr_year,
        db_path=Path(resolve('db_path', DEFAULT_DB_PATH)).expanduser(),
        duplicate_policy=parse_duplicate_policy(resolve('duplicate_policy', DuplicatePolicy.APPEND)),
        log_level=str(resolve('log_level', 'WARNING')),
        log_dir=resolve('log_dir', None),
    )
