"""
Configuration for glifcond.

- GLIFCondConfig / GLIFModel: biophysical parameter set and mechanism profile
- SimulationConfig: step size, delay horizon, ODE stepper settings
- ValidatedConfig / ValidatorRegistry: declarative validation rules
"""

from glifcond.config.base import BaseConfig
from glifcond.config.glif_config import GLIFCondConfig, GLIFModel, MechanismFlags, field_names
from glifcond.config.simulation_config import SimulationConfig
from glifcond.config.validation import ValidatedConfig, ValidatorRegistry

__all__ = [
    "BaseConfig",
    "GLIFCondConfig",
    "GLIFModel",
    "MechanismFlags",
    "SimulationConfig",
    "ValidatedConfig",
    "ValidatorRegistry",
    "field_names",
]
