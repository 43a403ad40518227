# wavtempo/config/__init__.py

"""
Configuration management for wavtempo.

This package handles loading configuration from files (TOML),
environment variables, and internal defaults, providing a unified
configuration object.
"""

from .models import WavTempoConfig
from .loaders import load_configuration

__all__ = [
    "WavTempoConfig",
    "load_configuration",
]
