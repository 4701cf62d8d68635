"""Global configuration constants for glifcond."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GlobalConfig:
    """Global configuration constants for glifcond.

    Defaults shared by the simulation config, the neuron and the event
    accumulators so that a neuron built without an explicit
    ``SimulationConfig`` behaves the same everywhere.
    """

    DEFAULT_DT_MS = 0.1
    """Default timestep in milliseconds (0.1 ms)."""

    DEFAULT_MAX_DELAY_STEPS: int = 100
    """Longest event delivery delay (in steps) the accumulators can hold."""

    DEFAULT_ODE_METHOD: str = "RK45"  # Embedded Runge-Kutta 4(5), adaptive step
    """Integration method passed to ``scipy.integrate.solve_ivp``."""

    DEFAULT_ODE_ATOL: float = 1e-3
    """Absolute error tolerance of the adaptive stepper."""

    DEFAULT_ODE_RTOL: float = 1e-6
    """Relative error tolerance of the adaptive stepper."""
