"""Utility functions."""

from .config import get_default_config, load_config
from .logging import configure_logging
from .math_utils import clamp, round_half_up

__all__ = ['load_config', 'get_default_config', 'configure_logging', 'clamp', 'round_half_up']
