# wavtempo/core/audio/__init__.py

"""
Core Audio Package.

Reading, validating and writing fixed-format PCM WAV files.
"""

from . import io

__all__ = [
    "io",
]
