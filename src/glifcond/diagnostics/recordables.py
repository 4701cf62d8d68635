"""
Recordables: named accessors to neuron state, sampled by data loggers.

Architecture
============
A neuron owns one ``RecordablesMap`` (ordered name -> accessor). A
``DataLogger`` is connected to a neuron with the names it wants and is
called once per step from the neuron's update loop:

    logger = neuron.connect_logging_device(["V_m", "g_0"])
    neuron.run(100)
    logger.data["V_m"]      # list of floats, one per sampled step
    logger.times            # sampled step indices

Accessors are looked up by name at every sample, so a logger keeps
working after the neuron reconfigures itself (as long as the channels it
asked for still exist).
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Callable, Dict, Iterator, List, Sequence

from glifcond.errors import UnknownRecordableError

Accessor = Callable[[], float]


class RecordablesMap:
    """Ordered registry of recordable channels."""

    def __init__(self) -> None:
        self._accessors: "OrderedDict[str, Accessor]" = OrderedDict()

    def insert(self, name: str, accessor: Accessor) -> None:
        """Register (or replace) channel ``name``; new names go last."""
        self._accessors[name] = accessor

    def erase(self, name: str) -> None:
        """Remove channel ``name``.

        Raises:
            UnknownRecordableError: If no such channel exists
        """
        if name not in self._accessors:
            raise UnknownRecordableError(name, self.get_list())
        del self._accessors[name]

    def get_list(self) -> List[str]:
        """Channel names in registration order."""
        return list(self._accessors)

    def get(self, name: str) -> float:
        """Current value of channel ``name``."""
        return float(self[name]())

    def __getitem__(self, name: str) -> Accessor:
        try:
            return self._accessors[name]
        except KeyError:
            raise UnknownRecordableError(name, self.get_list()) from None

    def __contains__(self, name: object) -> bool:
        return name in self._accessors

    def __iter__(self) -> Iterator[str]:
        return iter(self._accessors)

    def __len__(self) -> int:
        return len(self._accessors)


class DataLogger:
    """Samples a fixed set of recordables every ``interval_steps`` steps.

    Args:
        recordables: The neuron's map; looked up at every sample
        record_from: Channel names to sample
        interval_steps: Sampling interval in steps (>= 1)

    Raises:
        UnknownRecordableError: If a requested channel does not exist
        ValueError: If interval_steps < 1
    """

    def __init__(
        self,
        recordables: RecordablesMap,
        record_from: Sequence[str],
        interval_steps: int = 1,
    ) -> None:
        if interval_steps < 1:
            raise ValueError(f"interval_steps must be >= 1, got {interval_steps}")
        for name in record_from:
            if name not in recordables:
                raise UnknownRecordableError(name, recordables.get_list())

        self.recordables = recordables
        self.record_from = list(record_from)
        self.interval_steps = interval_steps
        self.times: List[int] = []
        self.data: Dict[str, List[float]] = {name: [] for name in self.record_from}

    def record(self, step: int) -> None:
        """Sample all channels if ``step`` falls on the sampling grid."""
        if step % self.interval_steps != 0:
            return
        self.times.append(step)
        for name in self.record_from:
            self.data[name].append(self.recordables.get(name))

    def clear(self) -> None:
        """Drop recorded samples."""
        self.times.clear()
        for samples in self.data.values():
            samples.clear()
