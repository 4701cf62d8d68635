"""
Resettable State Mixin for glifcond components.

Provides a standard interface for returning a component to its initial
dynamic state without touching its parameters.
"""

from __future__ import annotations

from typing import Iterable


class ResettableMixin:
    """Mixin for components with resettable state.

    Usage:
        class MyNeuron(ResettableMixin, nn.Module):
            def reset_state(self) -> None:
                '''Reset dynamic state for a new simulation.'''
                self.state = initial_state(self.config)
                self.reset_event_buffers(["spike_buffer", "current_buffer"])
    """

    def reset_state(self) -> None:
        """Reset dynamic state for a new simulation.

        Resets state variables (membrane potential, conductances, threshold
        components, pending events) while keeping parameters.

        Note:
            Subclasses must override this method.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} must implement reset_state()"
        )

    def reset_event_buffers(self, buffer_attrs: Iterable[str]) -> None:
        """Helper to drop pending events from the named accumulators.

        Args:
            buffer_attrs: Attribute names of objects exposing ``reset()``

        Note:
            Attributes that are missing or None are skipped.
        """
        for attr in buffer_attrs:
            buffer = getattr(self, attr, None)
            if buffer is not None:
                buffer.reset()


__all__ = ["ResettableMixin"]
