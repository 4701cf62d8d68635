"""
Diagnostics for glifcond neurons.

- RecordablesMap: ordered name -> accessor registry owned by each neuron
- DataLogger: per-step sampler connected through ``connect_logging_device``
"""

from glifcond.diagnostics.recordables import DataLogger, RecordablesMap

__all__ = [
    "DataLogger",
    "RecordablesMap",
]
