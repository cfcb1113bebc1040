# PATH: config/__init__.py
"""
Configuration loading utilities for nimbook.

Coin configurations are JSON or YAML documents with the keys
coin_name, coin_shortcut, rpc_url, rpc_timeout, block_addresses_to_keep and
the optional testnet_genesis_hash and devnet_genesis_hash.
String values may reference environment variables as ${VAR}; a .env file
in the working directory is loaded first.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from dotenv import load_dotenv

from core.exceptions import ConfigurationError


CONFIG_DIR = Path(__file__).parent
DEFAULT_COIN = "nimiq"

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

load_dotenv()


def load_yaml(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory

    Returns:
        Parsed YAML as dict

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the file is not valid YAML
    """
    filepath = CONFIG_DIR / filename
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid configuration file {filepath}: {e}",
                details={"path": str(filepath)},
            ) from e


def resolve_env(value: str) -> str:
    """
    Substitute ${VAR} references from the environment.

    Raises:
        ConfigurationError: If a referenced variable is not set
    """
    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name not in os.environ:
            raise ConfigurationError(
                f"Environment variable {name} referenced in configuration is not set",
                details={"variable": name},
            )
        return os.environ[name]

    return _ENV_PATTERN.sub(_replace, value)


def load_coin_config(source: Union[str, Path] = DEFAULT_COIN) -> Dict[str, Any]:
    """
    Load a coin configuration document.

    Args:
        source: Path to a .json/.yaml file, or the name of a bundled
            configuration (e.g. 'nimiq' for config/nimiq.yaml)

    Returns:
        Configuration dict with environment references resolved
    """
    path = Path(source)
    if not path.suffix:
        data = load_yaml(f"{source}.yaml")
    else:
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        text = path.read_text(encoding="utf-8")
        try:
            if path.suffix == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text) or {}
        except (ValueError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Invalid configuration file {path}: {e}",
                details={"path": str(path)},
            ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration file {source}: expected a mapping",
            details={"path": str(source)},
        )

    return {
        key: resolve_env(value) if isinstance(value, str) else value
        for key, value in data.items()
    }
