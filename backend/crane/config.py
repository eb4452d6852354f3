"""
Crane configuration: built-in defaults, YAML loading and the crane factory.
"""
import copy
import math
import os

import yaml

from .crane import Crane
from .protocol import MAX_REFRESH_MS

DEFAULT_CONFIG = {
    'crane': {
        'name': 'Mock Crane',
        # meters; these must match the frontend for IK to line up
        'geometry': {
            'd2_max': 2.0,  # crane height
            'd3': -0.1,     # elbow displacement
            'd4': -0.5,     # wrist displacement
            'r3': 0.6,      # upper arm length
            'r4': 0.6,      # forearm length
        },
        'rotary_gains': {'kp': 3.0, 'ki': 0.0, 'kd': 5.0},
        'linear_gains': {'kp': 2.5, 'ki': 0.0, 'kd': 3.0},
        'integral_limit': None,
    },
    'simulation': {
        'tick_ms': 16,
    },
    'server': {
        'host': '127.0.0.1',
        'port': 8080,
        'refresh_ms': 16,
    },
}


class ConfigError(ValueError):
    """Configuration file is missing or holds invalid values."""


def _merge(base, override):
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _merge(base[key], value)
        else:
            base[key] = value
    return base


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config):
    geometry = config['crane']['geometry']
    for key in ('d2_max', 'd3', 'd4', 'r3', 'r4'):
        if not _is_number(geometry.get(key)):
            raise ConfigError(f"crane.geometry.{key} must be a number")
    if geometry['r3'] <= 0 or geometry['r4'] <= 0:
        raise ConfigError("crane.geometry link lengths r3 and r4 must be positive")
    if geometry['d2_max'] < 0:
        raise ConfigError("crane.geometry.d2_max must not be negative")

    for section in ('rotary_gains', 'linear_gains'):
        gains = config['crane'][section]
        for key in ('kp', 'ki', 'kd'):
            if not _is_number(gains.get(key)):
                raise ConfigError(f"crane.{section}.{key} must be a number")

    limit = config['crane'].get('integral_limit')
    if limit is not None and (not _is_number(limit) or limit < 0):
        raise ConfigError("crane.integral_limit must be null or a non-negative number")

    tick_ms = config['simulation']['tick_ms']
    if not _is_int(tick_ms) or tick_ms <= 0:
        raise ConfigError("simulation.tick_ms must be a positive integer")

    refresh_ms = config['server']['refresh_ms']
    if not _is_int(refresh_ms) or not 0 <= refresh_ms <= MAX_REFRESH_MS:
        raise ConfigError(f"server.refresh_ms must be an integer in 0..{MAX_REFRESH_MS}")

    port = config['server']['port']
    if not _is_int(port) or not 0 < port < 65536:
        raise ConfigError("server.port must be an integer in 1..65535")

    return config


def load_config(config_path=None):
    """Load configuration from YAML, merged over DEFAULT_CONFIG.

    Args:
        config_path: Path to a YAML file, or None for defaults only

    Returns:
        Validated configuration dict
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path is not None:
        if not os.path.exists(config_path):
            raise ConfigError(f"Config file not found: {config_path}")
        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")
        _merge(config, data)

    return validate_config(config)


def build_crane(config):
    """Create a Crane from a configuration dict."""
    crane_cfg = config['crane']
    geometry = crane_cfg['geometry']
    rotary = crane_cfg['rotary_gains']
    linear = crane_cfg['linear_gains']

    return Crane(
        d2_max=geometry['d2_max'],
        d3=geometry['d3'],
        d4=geometry['d4'],
        r3=geometry['r3'],
        r4=geometry['r4'],
        rotary_gains=(rotary['kp'], rotary['ki'], rotary['kd']),
        linear_gains=(linear['kp'], linear['ki'], linear['kd']),
        integral_limit=crane_cfg.get('integral_limit'),
    )
