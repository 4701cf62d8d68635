"""
glifcond - Conductance-based generalized leaky integrate-and-fire neuron.

A single-neuron simulation engine for the five GLIF mechanism profiles
(Teeter et al. 2018) with alpha-function synaptic conductances.

Quick Start:
============

    from glifcond import GLIFCond, GLIFCondConfig, create_lif_r_asc_a

    neuron = create_lif_r_asc_a()
    neuron.handle_current(200.0, delay_steps=0)
    recorder = neuron.connect_logging_device(["V_m", "threshold"])
    spike_steps = neuron.run(1000)

Internal code should use explicit imports:

    from glifcond.components.neurons.glif_cond_neuron import GLIFCond
    from glifcond.config.glif_config import GLIFCondConfig, GLIFModel
"""

__version__ = "0.1.0"

# ============================================================================
# PUBLIC API
# ============================================================================

# Configuration
from glifcond.config import GLIFCondConfig, GLIFModel, SimulationConfig
from glifcond.global_config import GlobalConfig

# Neuron model
from glifcond.components.neurons import (
    GLIFCond,
    GLIFCondState,
    create_glif_neuron,
    create_lif,
    create_lif_asc,
    create_lif_r,
    create_lif_r_asc,
    create_lif_r_asc_a,
)

# Diagnostics
from glifcond.diagnostics import DataLogger, RecordablesMap

# Errors
from glifcond.errors import (
    ConfigurationError,
    GLIFError,
    SolverFailureError,
    UnknownReceptorTypeError,
    UnknownRecordableError,
)

__all__ = [
    "__version__",
    # Configuration
    "GLIFCondConfig",
    "GLIFModel",
    "SimulationConfig",
    "GlobalConfig",
    # Neuron model
    "GLIFCond",
    "GLIFCondState",
    "create_glif_neuron",
    "create_lif",
    "create_lif_r",
    "create_lif_asc",
    "create_lif_r_asc",
    "create_lif_r_asc_a",
    # Diagnostics
    "DataLogger",
    "RecordablesMap",
    # Errors
    "GLIFError",
    "ConfigurationError",
    "UnknownReceptorTypeError",
    "UnknownRecordableError",
    "SolverFailureError",
]
