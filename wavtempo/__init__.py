# wavtempo/__init__.py

"""
wavtempo: pitch-preserving tempo adjustment for mono PCM WAV files.
"""

from .version import __version__
from .core.stretch import stretch

__all__ = [
    "__version__",
    "stretch",
]
