"""
Configuration loading utilities for the domain registry.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from core.constants import DEFAULT_DOMAINS_FILE


CONFIG_DIR = Path(__file__).parent


def load_yaml(filename: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of file in config directory, or a path to any file

    Returns:
        Parsed YAML as dict
    """
    filepath = Path(filename)
    if not filepath.is_absolute() and not filepath.exists():
        filepath = CONFIG_DIR / filepath
    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_domains(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load the domains configuration.

    Maps a domain key to:
        domain_id: int (required)
        name: str (defaults to the key)
        rpc_endpoints: list[str], ${VAR} placeholders allowed
        confirmations: int
        overrides: mapping of transaction parameters
    """
    return load_yaml(path or DEFAULT_DOMAINS_FILE)


def get_domain_config(domain_key: str, path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Get configuration for a specific domain.

    Args:
        domain_key: Domain key (e.g., 'arbitrum_one')

    Returns:
        Domain configuration dict
    """
    domains = load_domains(path)
    if domain_key not in domains:
        raise KeyError(f"Unknown domain: {domain_key}")
    return domains[domain_key]
