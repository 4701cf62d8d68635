"""
Custom exception classes for glifcond.

Exception Hierarchy:
====================
GLIFError (base) - Base exception for all glifcond-specific errors
├── ConfigurationError - Invalid parameters, mechanism profile or status update
│   ├── UnknownReceptorTypeError - Event or connection addressed to a missing port
│   └── UnknownRecordableError - Logging request for a missing recordable
└── SolverFailureError - The adaptive ODE stepper could not finish a step

Every validation error is raised synchronously at the offending call and
leaves the previous valid configuration untouched.
"""

from __future__ import annotations

# =============================================================================
# Exception Hierarchy
# =============================================================================


class GLIFError(Exception):
    """Base exception for all glifcond-specific errors.

    All custom exceptions in glifcond inherit from this class, enabling
    code to catch glifcond errors specifically.
    """


class ConfigurationError(GLIFError):
    """Invalid configuration parameters.

    Raised when parameter values are out of valid range, incompatible
    with each other, or select an unsupported mechanism profile.
    """


class UnknownReceptorTypeError(ConfigurationError):
    """Event or connection addressed to a receptor port the neuron does not have."""

    def __init__(self, port: int, n_ports: int, model_name: str = "glif_cond"):
        self.port = port
        self.n_ports = n_ports
        super().__init__(
            f"{model_name} does not have receptor port {port} "
            f"(valid ports: [0, {n_ports}))"
        )


class UnknownRecordableError(ConfigurationError):
    """Data-logging request for a recordable that is not registered."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        super().__init__(
            f"Unknown recordable '{name}'. Available recordables: {available}"
        )


class SolverFailureError(GLIFError):
    """The adaptive ODE stepper failed to integrate across a simulation step."""

    def __init__(self, step: int, message: str):
        self.step = step
        super().__init__(f"ODE solver failed at step {step}: {message}")
