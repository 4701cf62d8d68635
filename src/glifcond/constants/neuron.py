"""
Neuron Constants - GLIF parameter values for the default cell.

The values below are the GLIF Model 5 fit of Allen Cell Types Database
cell 490626718 (celltypes.brain-map.org), converted from SI units to
mV, nS, pF, ms and pA and rounded.

Mechanism Groups:
=================
- Passive membrane: G_LEAK, E_LEAK, C_MEMBRANE, V_THRESHOLD, V_RESET, T_REF
- Spike-dependent threshold + fractional reset (GLIF 2, 4, 5)
- After-spike currents (GLIF 3, 4, 5)
- Voltage-dependent threshold (GLIF 5)
- Synaptic receptor ports (all models)

References:
-----------
- Teeter et al. (2018): Generalized leaky integrate-and-fire models
  classify multiple neuron types. Nature Communications 9:709.
- Meffin, Burkitt & Grayden (2004): An analytical model for the large,
  fluctuating synaptic conductance state typical of neocortical neurons
  in vivo. J. Comput. Neurosci. 16, 159-175.
"""

import math

# =============================================================================
# PASSIVE MEMBRANE
# =============================================================================

G_LEAK = 9.43
"""Membrane conductance (nS)."""

E_LEAK = -78.85
"""Resting membrane potential (mV)."""

C_MEMBRANE = 58.72
"""Membrane capacitance (pF). Passive time constant C/g ~ 6.2 ms."""

V_THRESHOLD = -51.68
"""Instantaneous (baseline) spike threshold (mV)."""

V_RESET = -78.85
"""Reset potential for models without fractional reset (mV)."""

T_REF = 3.75
"""Absolute refractory period (ms)."""

# =============================================================================
# SPIKE-DEPENDENT THRESHOLD (Teeter et al. Eq. 2, 5, 6)
# =============================================================================

TH_SPIKE_ADD = 0.37
"""Threshold increment at each spike (mV), delta_theta_s."""

TH_SPIKE_DECAY = 0.009
"""Decay rate of the spike component of the threshold (1/ms), b_s."""

VOLTAGE_RESET_FRACTION = 0.20
"""Voltage fraction kept across the reset, f_v."""

VOLTAGE_RESET_ADD = 18.51
"""Voltage added at reset (mV), -delta_V."""

# =============================================================================
# AFTER-SPIKE CURRENTS (Teeter et al. Eq. 3, 7)
# =============================================================================

ASC_INIT = (0.0, 0.0)
"""Initial after-spike currents (pA)."""

ASC_DECAY = (0.003, 0.1)
"""After-spike current decay rates (1/ms), k_j."""

ASC_AMPS = (-9.18, -198.94)
"""After-spike current increments at each spike (pA), delta_I_j."""

ASC_R = (1.0, 1.0)
"""Fraction of each after-spike current kept across a spike, f_j."""

# =============================================================================
# VOLTAGE-DEPENDENT THRESHOLD (Teeter et al. Eq. 4)
# =============================================================================

TH_VOLTAGE_INDEX = 0.005
"""Leak-like coupling of the voltage component to membrane voltage (1/ms), a_v."""

TH_VOLTAGE_DECAY = 0.09
"""Decay rate of the voltage component of the threshold (1/ms), b_v."""

# =============================================================================
# SYNAPTIC RECEPTOR PORTS
# =============================================================================

TAU_SYN = (0.2, 2.0)
"""Alpha-function time constants of the default receptor ports (ms)."""

E_REV = (0.0, -85.0)
"""Reversal potentials of the default receptor ports (mV).

Port 0 is excitatory (AMPA-like), port 1 inhibitory (GABA-like).
"""

ALPHA_PEAK_FACTOR = math.e
"""Scaling that gives an alpha function of time constant tau a unit peak.

An impulse of e / tau into the auxiliary state peaks at exactly 1 at t = tau.
"""
