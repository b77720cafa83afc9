"""
Configuration files of localjudge.

Settings come in layers, each one a localjudge.yaml mapping:

  1. the defaults shipped in this package
  2. /etc/localjudge/localjudge.yaml
  3. $XDG_CONFIG_HOME/localjudge/localjudge.yaml
  4. <workspace>/.localjudge/localjudge.yaml

This module reads and merges layers; the order is applied by
settings.resolve_settings().
"""
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

CONFIG_FILE = 'localjudge.yaml'
WORKSPACE_CONFIG_DIR = '.localjudge'


class ConfigError(Exception):
    pass


def read_config_file(path: Path) -> dict[str, Any] | None:
    """Parse one layer.

    Returns:
        the mapping in the file, or None if the file does not exist or
        is empty.

    Raises:
        ConfigError if the file is not YAML, or does not hold a mapping.
    """
    if not path.is_file():
        return None
    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f'Config file {path}: failed to parse: {err}')
    if data is None:
        return None
    if not isinstance(data, Mapping):
        raise ConfigError(f'Config file {path}: expected a mapping at top level')
    return dict(data)


def load_defaults() -> dict[str, Any]:
    path = Path(__file__).parent / CONFIG_FILE
    data = read_config_file(path)
    if data is None:
        raise ConfigError(f'Default configuration {path} is missing')
    return data


def user_config_files() -> list[Path]:
    """Machine-wide and per-user layers, lowest priority first."""
    xdg_config_home = Path(os.environ.get('XDG_CONFIG_HOME', Path.home() / '.config'))
    return [
        Path('/etc/localjudge') / CONFIG_FILE,
        xdg_config_home / 'localjudge' / CONFIG_FILE,
    ]


def workspace_config_file(workspace: str | Path) -> Path:
    return Path(workspace) / WORKSPACE_CONFIG_DIR / CONFIG_FILE


def merged(base: Mapping[str, Any], layer: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of base with layer applied on top.

    Mappings present on both sides (e.g. compare) are merged key by key.
    Any other value in layer, lists included, replaces the one in base.
    Neither argument is modified.
    """
    result = dict(base)
    for key, value in layer.items():
        current = result.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            result[key] = merged(current, value)
        else:
            result[key] = value
    return result
