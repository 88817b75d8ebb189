#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

from .exit_codes import ConfigError

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("ghchecks")

# OAuth app used for the device flow
GITHUB_CLIENT_ID = "Iv1.6759afe4a207433f"


def get_config_dir():
    """Directory holding ghchecks configuration and credentials."""
    return Path.home() / '.ghchecks'


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. GHCHECKS_CONFIG environment variable
    2. ~/.ghchecks/config.{json,toml,yaml,yml}
    """
    # Check for environment variable override
    if 'GHCHECKS_CONFIG' in os.environ:
        path = Path(os.environ['GHCHECKS_CONFIG'])
        if path.exists():
            return path

    config_dir = get_config_dir()
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    return config_dir / 'config.json'


def get_credentials_path(config=None):
    """Get the path of the stored GitHub credential.

    GHCHECKS_CREDENTIALS wins over the auth.credentials_path setting.
    """
    if os.environ.get('GHCHECKS_CREDENTIALS'):
        return Path(os.environ['GHCHECKS_CREDENTIALS']).expanduser()

    configured = (config or {}).get('auth', {}).get('credentials_path')
    if configured:
        return Path(configured).expanduser()
    return get_config_dir() / 'credentials.json'


def _read_config_file(config_path):
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ['.yaml', '.yml']:
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    # Default to JSON format
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config():
    """Load configuration from file.

    Raises:
        ConfigError: when the file exists but cannot be parsed
    """
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            file_config = _read_config_file(config_path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config from {config_path}: {e}")

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        # Merge file config with defaults
        config = merge_configs(config, file_config)

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "github": {
            "api_url": "https://api.github.com",
            "oauth_url": "https://github.com",
            "client_id": GITHUB_CLIENT_ID,
            "scopes": ["repo"],
            "per_page": 100,
            "timeout_seconds": 30,
            "rate_limit": {
                "max_retries": 3,
                "base_delay_seconds": 1.0,
                "max_delay_seconds": 60
            }
        },
        "auth": {
            "credentials_path": "",
            "timeout_seconds": 900,
            "open_browser": True
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s"
        }
    }


def configure_logging(config, verbose=False):
    """Apply the logging section of the config to the ghchecks logger."""
    section = config.get('logging', {})
    level_name = 'DEBUG' if verbose else str(section.get('level', 'WARNING')).upper()
    level = getattr(logging, level_name, logging.WARNING)
    logger.setLevel(level)

    fmt = section.get('format')
    if fmt:
        for handler in logging.getLogger().handlers:
            handler.setFormatter(logging.Formatter(fmt))


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: GHCHECKS_SECTION_SUBSECTION_KEY
    For example: GHCHECKS_GITHUB_RATE_LIMIT_MAX_RETRIES=5
    """
    env_prefix = "GHCHECKS_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix):
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config
