"""
GLIF neuron model.

This module contains the conductance-based GLIF neuron, its state and
cached coefficients, the ODE right-hand side and the profile factories.
"""

from glifcond.components.neurons.glif_coefficients import GLIFCoefficients, calibrate_coefficients
from glifcond.components.neurons.glif_cond_neuron import GLIFCond, recordable_names
from glifcond.components.neurons.glif_dynamics import DynamicsParams, glif_cond_dynamics, integrate_step
from glifcond.components.neurons.glif_state import GLIFCondState
from glifcond.components.neurons.neuron_factory import (
    create_glif_neuron,
    create_lif,
    create_lif_asc,
    create_lif_r,
    create_lif_r_asc,
    create_lif_r_asc_a,
    glif_config,
)

__all__ = [
    # Neuron model
    "GLIFCond",
    "GLIFCondState",
    "recordable_names",
    # Numerics
    "GLIFCoefficients",
    "calibrate_coefficients",
    "DynamicsParams",
    "glif_cond_dynamics",
    "integrate_step",
    # Neuron factory
    "glif_config",
    "create_glif_neuron",
    "create_lif",
    "create_lif_r",
    "create_lif_asc",
    "create_lif_r_asc",
    "create_lif_r_asc_a",
]
