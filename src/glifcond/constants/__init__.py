"""
Centralized Constants for glifcond.

Usage:
======
    from glifcond.constants.neuron import G_LEAK, TAU_SYN

    # Or import the whole category
    from glifcond.constants import neuron
"""

from __future__ import annotations

from . import neuron

__all__ = ["neuron"]
