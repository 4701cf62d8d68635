"""
Factory functions for the five GLIF mechanism profiles.

Each factory fills in the parameters of one profile from the Allen Cell
Types fit in :mod:`glifcond.constants.neuron` and leaves everything else
at the config defaults.

Usage:
======
    from glifcond.components.neurons import create_lif_r_asc_a, create_glif_neuron

    # GLIF 5 with defaults
    neuron = create_lif_r_asc_a()

    # GLIF 3 with a shorter refractory period and three receptor ports
    neuron = create_glif_neuron(
        3,
        t_ref=2.0,
        tau_syn=(0.2, 2.0, 5.0),
        E_rev=(0.0, -85.0, -20.0),
    )
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from glifcond.components.neurons.glif_cond_neuron import GLIFCond
from glifcond.config.glif_config import GLIFCondConfig, GLIFModel
from glifcond.config.simulation_config import SimulationConfig
from glifcond.constants.neuron import (
    ASC_AMPS,
    ASC_DECAY,
    ASC_INIT,
    ASC_R,
    TH_SPIKE_ADD,
    TH_SPIKE_DECAY,
    TH_VOLTAGE_DECAY,
    TH_VOLTAGE_INDEX,
    VOLTAGE_RESET_ADD,
    VOLTAGE_RESET_FRACTION,
)
from glifcond.errors import ConfigurationError

SPIKE_THRESHOLD_DEFAULTS: Dict[str, Any] = {
    "th_spike_add": TH_SPIKE_ADD,
    "th_spike_decay": TH_SPIKE_DECAY,
    "voltage_reset_fraction": VOLTAGE_RESET_FRACTION,
    "voltage_reset_add": VOLTAGE_RESET_ADD,
}

ASC_DEFAULTS: Dict[str, Any] = {
    "asc_init": ASC_INIT,
    "asc_decay": ASC_DECAY,
    "asc_amps": ASC_AMPS,
    "asc_r": ASC_R,
}

VOLTAGE_THRESHOLD_DEFAULTS: Dict[str, Any] = {
    "th_voltage_index": TH_VOLTAGE_INDEX,
    "th_voltage_decay": TH_VOLTAGE_DECAY,
}


def glif_config(model: Union[GLIFModel, int], **overrides: Any) -> GLIFCondConfig:
    """Build a validated config for ``model`` (enum or level 1-5).

    Args:
        model: Mechanism profile
        **overrides: Parameters replacing the profile defaults

    Returns:
        GLIFCondConfig for the profile

    Raises:
        ConfigurationError: If the overrides are invalid or select a
            different profile than requested
    """
    if not isinstance(model, GLIFModel):
        model = GLIFModel.from_level(model)

    params: Dict[str, Any] = {}
    if model.has_theta_spike:
        params.update(SPIKE_THRESHOLD_DEFAULTS)
    if model.has_asc:
        params.update(ASC_DEFAULTS)
    if model.has_theta_voltage:
        params.update(VOLTAGE_THRESHOLD_DEFAULTS)
    params.update(overrides)

    config = GLIFCondConfig(**params)
    if config.model is not model:
        raise ConfigurationError(
            f"Overrides turn {model.name} into {config.model.name}; use that profile instead"
        )
    return config


def create_glif_neuron(
    model: Union[GLIFModel, int],
    sim_config: Optional[SimulationConfig] = None,
    **overrides: Any,
) -> GLIFCond:
    """Create a GLIF neuron for ``model`` (enum or level 1-5).

    Examples:
        >>> neuron = create_glif_neuron(GLIFModel.LIF_R)
        >>> neuron = create_glif_neuron(5, th_voltage_index=0.01)
    """
    return GLIFCond(glif_config(model, **overrides), sim_config=sim_config)


def create_lif(sim_config: Optional[SimulationConfig] = None, **overrides: Any) -> GLIFCond:
    """GLIF 1: leaky integrate-and-fire, reset to V_reset."""
    return create_glif_neuron(GLIFModel.LIF, sim_config, **overrides)


def create_lif_r(sim_config: Optional[SimulationConfig] = None, **overrides: Any) -> GLIFCond:
    """GLIF 2: LIF with spike-dependent threshold and fractional reset."""
    return create_glif_neuron(GLIFModel.LIF_R, sim_config, **overrides)


def create_lif_asc(sim_config: Optional[SimulationConfig] = None, **overrides: Any) -> GLIFCond:
    """GLIF 3: LIF with after-spike currents."""
    return create_glif_neuron(GLIFModel.LIF_ASC, sim_config, **overrides)


def create_lif_r_asc(sim_config: Optional[SimulationConfig] = None, **overrides: Any) -> GLIFCond:
    """GLIF 4: GLIF 2 plus after-spike currents."""
    return create_glif_neuron(GLIFModel.LIF_R_ASC, sim_config, **overrides)


def create_lif_r_asc_a(sim_config: Optional[SimulationConfig] = None, **overrides: Any) -> GLIFCond:
    """GLIF 5: GLIF 4 plus the voltage-dependent threshold component.

    This is the full fit of Allen cell 490626718.
    """
    return create_glif_neuron(GLIFModel.LIF_R_ASC_A, sim_config, **overrides)
