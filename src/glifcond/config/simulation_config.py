"""
Simulation Configuration - step size, delay horizon and ODE stepper settings.

These are the parameters owned by whoever drives the neuron (the
simulation kernel) rather than by the neuron's biophysics. Changing
``dt_ms`` requires the neuron to recalibrate its cached coefficients.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from glifcond.config.base import BaseConfig
from glifcond.config.validation import ValidatedConfig
from glifcond.errors import ConfigurationError
from glifcond.global_config import GlobalConfig

SUPPORTED_ODE_METHODS = ("RK45", "RK23", "DOP853")
"""Explicit adaptive ``solve_ivp`` methods usable as the step integrator."""


@dataclass
class SimulationConfig(BaseConfig, ValidatedConfig):
    """Simulation-wide parameters for a GLIF neuron.

    Inherits device and dtype from BaseConfig.

    Example:
        config = SimulationConfig(
            dt_ms=0.05,
            ode_atol=1e-6,  # Tighter error control for conductance studies
        )
    """

    # =========================================================================
    # TIMING
    # =========================================================================
    dt_ms: float = GlobalConfig.DEFAULT_DT_MS
    """Simulation timestep in milliseconds."""

    max_delay_steps: int = GlobalConfig.DEFAULT_MAX_DELAY_STEPS
    """Largest delivery delay (steps) accepted for spike and current events."""

    # =========================================================================
    # ODE STEPPER
    # =========================================================================
    ode_method: str = GlobalConfig.DEFAULT_ODE_METHOD
    """``scipy.integrate.solve_ivp`` method used for the continuous state."""

    ode_atol: float = GlobalConfig.DEFAULT_ODE_ATOL
    """Absolute tolerance of the adaptive stepper."""

    ode_rtol: float = GlobalConfig.DEFAULT_ODE_RTOL
    """Relative tolerance of the adaptive stepper."""

    _validation_rules = {
        'dt_ms': ('positive', 'finite'),
        'max_delay_steps': ('positive_integer',),
        'ode_atol': ('positive', 'finite'),
        'ode_rtol': ('positive', 'finite'),
    }

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate_config()
        if self.ode_method not in SUPPORTED_ODE_METHODS:
            raise ConfigurationError(
                f"ode_method must be one of {SUPPORTED_ODE_METHODS}, got '{self.ode_method}'"
            )
        if self.dtype not in ("float32", "float64"):
            raise ConfigurationError(f"dtype must be 'float32' or 'float64', got '{self.dtype}'")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "device": self.device,
            "dtype": self.dtype,
            "dt_ms": self.dt_ms,
            "max_delay_steps": self.max_delay_steps,
            "ode_method": self.ode_method,
            "ode_atol": self.ode_atol,
            "ode_rtol": self.ode_rtol,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SimulationConfig":
        """Create from dictionary."""
        return cls(**d)
