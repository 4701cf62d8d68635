"""
Cached per-step coefficients of the GLIF update.

Everything the update loop multiplies by is derived here once per
(config, dt) pair. Mechanisms that are switched off get neutral values
(decay rate 1, increments 0, empty arrays), so the loop itself never
branches on the model profile.

Refractory decay:
    The refractory period is rounded to ``refractory_counts`` whole steps.
    The spike component and the after-spike currents are held during those
    steps. Their decay over the whole period is applied at spike time
    instead, with the factors exp(-k * t_ref), before the new increment is
    added:

        theta_s <- theta_s * exp(-b_s t_ref) + th_spike_add
        I_j     <- r_j * I_j * exp(-k_j t_ref) + amp_j

Voltage-dependent threshold (exact update over one step h):
    d(theta_v)/dt = a_v * V - b_v * theta_v
    V(t) = beta + (v0 - beta) * exp(-g t / C_m)

    theta_v(h) = phi (v0 - beta) P + D (theta_v - phi (v0 - beta) - r beta) + r beta

    with P = exp(-g h / C_m), D = exp(-b_v h), r = a_v / b_v and
    phi = a_v / (b_v - g / C_m).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import torch

from glifcond.config.glif_config import GLIFCondConfig
from glifcond.constants.neuron import ALPHA_PEAK_FACTOR
from glifcond.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class GLIFCoefficients:
    """Step-size dependent constants of one neuron.

    Voltages are relative to E_L. Tensor fields are float64 and share the
    device of the neuron state.
    """

    dt_ms: float
    refractory_counts: int

    # Membrane
    potential_decay_rate: float
    th_inf: float

    # Reset rule: V <- reset_fraction * threshold + reset_add
    reset_fraction: float
    reset_add: float

    # Spike component
    theta_spike_add: float
    theta_spike_decay_rate: float
    theta_spike_refractory_decay_rate: float  # over t_ref, applied at spike time

    # Voltage component
    theta_voltage_decay_rate_inverse: float
    abpara_ratio_voltage: float
    phi: float

    # After-spike currents [n_asc]
    asc_decay_rates: torch.Tensor
    asc_stable_coeffs: torch.Tensor
    asc_refractory_decay_rates: torch.Tensor  # over t_ref, applied at spike time
    asc_r: torch.Tensor
    asc_amps: torch.Tensor

    # Alpha-function impulse per unit weight [n_receptors]
    cond_initial_values: torch.Tensor

    @property
    def n_asc(self) -> int:
        return int(self.asc_decay_rates.shape[0])

    @property
    def n_receptors(self) -> int:
        return int(self.cond_initial_values.shape[0])


def _stable_coeffs(k: torch.Tensor, h: float) -> torch.Tensor:
    """Step average of exp(-k t) over [0, h]: (1 - exp(-k h)) / (k h)."""
    kh = k * h
    return -torch.expm1(-kh) / kh


def calibrate_coefficients(
    config: GLIFCondConfig,
    dt_ms: float,
    device: torch.device | str = "cpu",
) -> GLIFCoefficients:
    """Compute the cached coefficients for ``config`` at step size ``dt_ms``.

    Args:
        config: Validated parameter set
        dt_ms: Simulation step (ms), > 0
        device: Device of the returned tensors

    Returns:
        GLIFCoefficients for this configuration

    Raises:
        ConfigurationError: If dt_ms is not positive or the refractory
            period rounds to a negative number of steps
    """
    if not dt_ms > 0:
        raise ConfigurationError(f"dt_ms must be > 0, got {dt_ms}")

    refractory_counts = config.refractory_counts(dt_ms)

    def as_tensor(values) -> torch.Tensor:
        return torch.tensor(values, dtype=torch.float64, device=device).reshape(-1)

    # Reset rule
    if config.spike_dependent_threshold:
        reset_fraction = config.voltage_reset_fraction
        reset_add = config.voltage_reset_add
    else:
        reset_fraction = 0.0
        reset_add = config.V_reset - config.E_L

    # Spike component
    if config.spike_dependent_threshold:
        theta_spike_add = config.th_spike_add
        theta_spike_decay_rate = math.exp(-config.th_spike_decay * dt_ms)
        theta_spike_refractory_decay_rate = math.exp(-config.th_spike_decay * config.t_ref)
    else:
        theta_spike_add = 0.0
        theta_spike_decay_rate = 1.0
        theta_spike_refractory_decay_rate = 1.0

    # Voltage component
    membrane_rate = config.g / config.C_m
    if config.adapting_threshold:
        a_v = config.th_voltage_index
        b_v = config.th_voltage_decay
        theta_voltage_decay_rate_inverse = math.exp(-b_v * dt_ms)
        abpara_ratio_voltage = a_v / b_v
        phi = a_v / (b_v - membrane_rate)
    else:
        theta_voltage_decay_rate_inverse = 1.0
        abpara_ratio_voltage = 0.0
        phi = 0.0

    # After-spike currents
    k = as_tensor(config.asc_decay)
    asc_decay_rates = torch.exp(-k * dt_ms)
    asc_refractory_decay_rates = torch.exp(-k * config.t_ref)

    coeffs = GLIFCoefficients(
        dt_ms=dt_ms,
        refractory_counts=refractory_counts,
        potential_decay_rate=math.exp(-membrane_rate * dt_ms),
        th_inf=config.V_th - config.E_L,
        reset_fraction=reset_fraction,
        reset_add=reset_add,
        theta_spike_add=theta_spike_add,
        theta_spike_decay_rate=theta_spike_decay_rate,
        theta_spike_refractory_decay_rate=theta_spike_refractory_decay_rate,
        theta_voltage_decay_rate_inverse=theta_voltage_decay_rate_inverse,
        abpara_ratio_voltage=abpara_ratio_voltage,
        phi=phi,
        asc_decay_rates=asc_decay_rates,
        asc_stable_coeffs=_stable_coeffs(k, dt_ms),
        asc_refractory_decay_rates=asc_refractory_decay_rates,
        asc_r=as_tensor(config.asc_r),
        asc_amps=as_tensor(config.asc_amps),
        cond_initial_values=ALPHA_PEAK_FACTOR / as_tensor(config.tau_syn),
    )

    logger.debug(
        "Calibrated %s at dt=%.4g ms: refractory_counts=%d",
        config.model.name, dt_ms, refractory_counts,
    )
    return coeffs
