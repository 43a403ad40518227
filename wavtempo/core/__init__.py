# wavtempo/core/__init__.py

"""
Core Processing Package for wavtempo.

Contains modules for:
- Errors shared by the engine and the batch tooling
- The time-stretching engine (stretch subpackage)
- Audio I/O and format validation
- Signal measurements
- Batch processing over directory trees
"""

from . import errors
from . import stretch
from . import audio
from . import analysis
from . import batch_processor

__all__ = [
    "errors",
    "stretch",
    "audio",
    "analysis",
    "batch_processor",
]
