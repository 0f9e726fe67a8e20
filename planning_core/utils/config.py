"""Configuration management."""

import copy
import json
from pathlib import Path
from typing import Any, Dict

import yaml

from ..errors import ConfigError


def load_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML or JSON file, layered over the defaults."""
    path = Path(config_path)
    
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    
    with open(path, 'r') as f:
        if path.suffix.lower() in ['.yaml', '.yml']:
            loaded = yaml.safe_load(f)
        elif path.suffix.lower() == '.json':
            loaded = json.load(f)
        else:
            raise ConfigError(
                f"Unsupported config file format: {path.suffix}",
                details={"path": str(path)},
            )
    
    if loaded is None:
        loaded = {}
    if not isinstance(loaded, dict):
        raise ConfigError(
            "Config file must contain a mapping at the top level",
            details={"path": str(path)},
        )
    
    return merge_config(get_default_config(), loaded)


def merge_config(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        'dependencies': {
            'implicit_threshold': 0.5,
            'min_keyword_score': 0.1,
        },
        'estimation': {
            'min_samples': 3,
            'saturation_samples': 10,
            'band_thresholds': {
                'low': 3,     # complexity <= 3
                'medium': 6,  # complexity <= 6, anything above is high
            },
        },
        'confidence': {
            'warning_threshold': 70,
            'error_threshold': 50,
            'weights': {
                'input_completeness': 0.3,
                'ai_self_assessment': 0.4,
                'pattern_match': 0.3,
            },
            'max_questions': 5,
            'neutral_self_assessment': 0.5,
        },
        'evaluation': {
            'item_count': 40,
            'history_size': 60,
            'overrun_mean': {
                'low': 1.1,
                'medium': 1.3,
                'high': 1.6,
            },
            'overrun_std': 0.25,
        },
    }
