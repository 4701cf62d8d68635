"""
Accumulating Delay Buffer - Event accumulators for delayed inputs.

Incoming spike weights and currents are delivered with an integer delay
(in simulation steps). The neuron reads one slot per step, so events
scheduled for the same step (and the same column) are summed.

Layout:
    buffer[slot, column]   slot = (ptr + delay) % (max_delay + 1)

One column per receptor port for spike weights, a single column for
injected current.
"""

from __future__ import annotations

import torch
import torch.nn as nn


class AccumulatingDelayBuffer(nn.Module):
    """Ring buffer that sums values scheduled for future timesteps.

    Unlike an axonal delay line (write now, read ``delay`` steps in the
    past), this buffer is written ``delay`` steps into the future and
    drained once per step with :meth:`pop`.

    Memory: O(max_delay × size) per buffer
    Add/Pop: O(1) per operation

    Args:
        max_delay: Maximum delay in timesteps (buffer depth = max_delay + 1)
        size: Number of columns (receptor ports, or 1 for currents)
        device: Torch device ('cpu', 'cuda', etc.)
        dtype: Data type for buffer (default: torch.float64)
    """

    def __init__(
        self,
        max_delay: int,
        size: int,
        device: str = "cpu",
        dtype: torch.dtype = torch.float64,
    ):
        if max_delay < 0:
            raise ValueError(f"max_delay must be >= 0, got {max_delay}")
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}")

        super().__init__()

        self.max_delay = max_delay
        self.size = size
        self.dtype = dtype

        # Buffer: [max_delay + 1, size]
        self.register_buffer(
            "buffer",
            torch.zeros((max_delay + 1, size), dtype=dtype, device=device),
        )

        # Slot read by the next pop()
        self.ptr = 0

    @property
    def device(self) -> torch.device:  # type: ignore[override]
        """Device where the buffer tensor resides."""
        return self.buffer.device

    def _slot(self, delay: int) -> int:
        if delay < 0 or delay > self.max_delay:
            raise ValueError(f"Delay {delay} out of range [0, {self.max_delay}]")
        return (self.ptr + delay) % (self.max_delay + 1)

    def add_value(self, delay: int, index: int, value: float) -> None:
        """Accumulate ``value`` into column ``index``, ``delay`` steps ahead.

        Args:
            delay: Steps until delivery (0 = consumed by the next pop())
            index: Column (receptor port)
            value: Amount to add

        Raises:
            ValueError: If delay or index is out of range
        """
        if index < 0 or index >= self.size:
            raise ValueError(f"Column {index} out of range [0, {self.size})")
        self.buffer[self._slot(delay), index] += value

    def read(self, delay: int = 0) -> torch.Tensor:
        """Peek at the values pending ``delay`` steps ahead without consuming them."""
        return self.buffer[self._slot(delay)]

    def pop(self) -> torch.Tensor:
        """Return this step's accumulated values, clear the slot and advance.

        Returns:
            Tensor [size] with the sums delivered this step
        """
        values = self.buffer[self.ptr].clone()
        self.buffer[self.ptr].zero_()
        self.ptr = (self.ptr + 1) % (self.max_delay + 1)
        return values

    def resize(self, size: int) -> None:
        """Change the number of columns, keeping pending values of kept columns.

        New columns start empty; dropped columns are discarded.
        """
        if size < 0:
            raise ValueError(f"size must be >= 0, got {size}")
        if size == self.size:
            return

        new_buffer = torch.zeros(
            (self.max_delay + 1, size), dtype=self.dtype, device=self.buffer.device
        )
        kept = min(size, self.size)
        new_buffer[:, :kept] = self.buffer[:, :kept]
        self.register_buffer("buffer", new_buffer)
        self.size = size

    def reset(self) -> None:
        """Drop all pending values."""
        self.buffer.zero_()
        self.ptr = 0
