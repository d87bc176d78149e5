# portclient/configuration.py

"""
Configuration loader for portclient.

Handles loading option defaults from portclient.yaml. A missing file means
the built-in defaults; 'portclient --init-config' writes one to edit.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError

CONFIG_ENV_VAR = "PORTCLIENT_CONFIG"

# Defaults for every run. Command line flags override these.
DEFAULT_CONFIG = {
    'method': 'tcp',          # Options: tcp, udp
    'action': 'check',        # Options: check, exists, kill
    'speed': 'safe',          # Options: safe, fast
    'graceful': False,        # kill with SIGTERM instead of SIGKILL (ignored on Windows)
    'verbose': False,
}

_HEADER = (
    "# portclient Configuration File\n"
    "# These values are used as defaults; command line flags take precedence.\n\n"
)


def get_config_path() -> str:
    """Returns the path to the config file."""
    return os.environ.get(CONFIG_ENV_VAR) or "portclient.yaml"


def save_config(config: Dict[str, Any], path: Optional[str] = None) -> str:
    """Saves the provided configuration dictionary and returns the path written."""
    config_path = path or get_config_path()
    try:
        with open(config_path, 'w') as f:
            f.write(_HEADER)
            yaml.dump(config, f, sort_keys=False, default_flow_style=False, indent=2)
    except IOError as e:
        raise ConfigurationError(f"Could not write config file to '{config_path}': {e}") from e
    logging.info(f"Wrote configuration to '{config_path}'.")
    return config_path


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads configuration and merges it over DEFAULT_CONFIG.

    A missing file yields the defaults. An unreadable or invalid file raises
    ConfigurationError.
    """
    config_path = path or get_config_path()
    config = DEFAULT_CONFIG.copy()
    try:
        with open(config_path, 'r') as f:
            user_config = yaml.safe_load(f)
    except FileNotFoundError:
        logging.debug(f"No configuration file at '{config_path}', using defaults.")
        return config
    except IOError as e:
        raise ConfigurationError(f"Could not read '{config_path}': {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Error parsing '{config_path}': {e}") from e

    if user_config is None:
        return config
    if not isinstance(user_config, dict):
        raise ConfigurationError(f"'{config_path}' must contain a mapping of option names to values.")

    unknown = sorted(set(user_config) - set(DEFAULT_CONFIG))
    if unknown:
        logging.warning(f"Ignoring unknown settings in '{config_path}': {', '.join(map(str, unknown))}")
    config.update({key: value for key, value in user_config.items() if key in DEFAULT_CONFIG})
    return config
