"""Utility Functions.

General utilities for glifcond.
"""

from glifcond.utils.delay_buffer import AccumulatingDelayBuffer

__all__ = [
    "AccumulatingDelayBuffer",
]
