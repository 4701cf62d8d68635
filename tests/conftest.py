"""Shared test fixtures and configuration."""

import numpy as np
import pytest
import torch

from glifcond.config import SimulationConfig


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure reproducible tests by setting all random seeds."""
    torch.manual_seed(42)
    np.random.seed(42)


@pytest.fixture
def sim_config():
    """Default simulation settings (dt = 0.1 ms)."""
    return SimulationConfig()


@pytest.fixture
def precise_sim_config():
    """Tight stepper tolerances for comparisons against closed-form solutions."""
    return SimulationConfig(ode_atol=1e-10, ode_rtol=1e-10)
