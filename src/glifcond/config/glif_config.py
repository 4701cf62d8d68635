"""
GLIF neuron parameter set and mechanism profiles.

Membrane equation (voltages relative to E_L):
    C_m dV/dt = -g V - sum_i g_i (V + E_L - E_rev_i) + I_e + sum_j I_j

The three optional mechanisms are switched on by *populating* their
parameters; the resulting flag tuple must be one of five legal profiles:

    ======  =====================  =====  ===========  =====================
    GLIF    profile                theta  after-spike  voltage-dependent
                                   spike  currents     threshold
    ======  =====================  =====  ===========  =====================
    1       LIF                    no     no           no
    2       LIF_R                  yes    no           no
    3       LIF_ASC                no     yes          no
    4       LIF_R_ASC              yes    yes          no
    5       LIF_R_ASC_A            yes    yes          yes
    ======  =====================  =====  ===========  =====================

The voltage-dependent component without the spike component has no
defined reset rule and is rejected.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple

from glifcond.config.validation import ValidatedConfig
from glifcond.constants.neuron import (
    C_MEMBRANE,
    E_LEAK,
    E_REV,
    G_LEAK,
    T_REF,
    TAU_SYN,
    V_RESET,
    V_THRESHOLD,
)
from glifcond.errors import ConfigurationError

MechanismFlags = Tuple[bool, bool, bool]
"""(spike_dependent_threshold, after_spike_currents, adapting_threshold)."""

SPIKE_THRESHOLD_FIELDS = (
    "th_spike_add",
    "th_spike_decay",
    "voltage_reset_fraction",
    "voltage_reset_add",
)
ASC_FIELDS = ("asc_init", "asc_decay", "asc_amps", "asc_r")
VOLTAGE_THRESHOLD_FIELDS = ("th_voltage_index", "th_voltage_decay")
RECEPTOR_FIELDS = ("tau_syn", "E_rev")
ARRAY_FIELDS = ASC_FIELDS + RECEPTOR_FIELDS


class GLIFModel(Enum):
    """The five legal mechanism profiles, keyed by their flag tuple."""

    LIF = (False, False, False)
    LIF_R = (True, False, False)
    LIF_ASC = (False, True, False)
    LIF_R_ASC = (True, True, False)
    LIF_R_ASC_A = (True, True, True)

    @classmethod
    def from_flags(
        cls,
        spike_dependent_threshold: bool,
        after_spike_currents: bool,
        adapting_threshold: bool,
    ) -> "GLIFModel":
        """Select the profile for a flag tuple, rejecting illegal combinations."""
        flags = (bool(spike_dependent_threshold), bool(after_spike_currents), bool(adapting_threshold))
        try:
            return cls(flags)
        except ValueError:
            raise ConfigurationError(
                "Incorrect model mechanism combination "
                f"(spike_dependent_threshold, after_spike_currents, adapting_threshold) = {flags}. "
                f"Supported combinations: {[m.value for m in cls]}"
            ) from None

    @classmethod
    def from_level(cls, level: int) -> "GLIFModel":
        """Profile for GLIF model number 1-5."""
        models = list(cls)
        if not 1 <= level <= len(models):
            raise ConfigurationError(f"GLIF model level must be in [1, {len(models)}], got {level}")
        return models[level - 1]

    @property
    def level(self) -> int:
        """GLIF model number (1-5)."""
        return list(type(self)).index(self) + 1

    @property
    def has_theta_spike(self) -> bool:
        return self.value[0]

    @property
    def has_asc(self) -> bool:
        return self.value[1]

    @property
    def has_theta_voltage(self) -> bool:
        return self.value[2]


def _as_float_tuple(values: Any, name: str) -> Tuple[float, ...]:
    is_array = hasattr(values, "tolist")
    if isinstance(values, (str, bytes)) or not (is_array or isinstance(values, Sequence)):
        raise ConfigurationError(f"{name} must be a sequence of numbers, got {type(values).__name__}")
    if is_array:
        values = values.tolist()
    try:
        return tuple(float(v) for v in values)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must contain only numbers, got {values!r}") from None


@dataclass
class GLIFCondConfig(ValidatedConfig):
    """Parameter set of the conductance-based GLIF neuron.

    Voltages are absolute (mV). Optional mechanism parameters default to
    ``None`` / empty, which gives the plain LIF profile; see the module
    docstring for how populated parameters select the profile.

    Attributes:
        g: Membrane conductance (nS)
        E_L: Resting membrane potential (mV)
        V_th: Instantaneous threshold (mV)
        C_m: Membrane capacitance (pF)
        t_ref: Refractory period (ms); rounded to whole steps at calibration
        V_reset: Reset potential (mV), used by the profiles without
            spike-dependent threshold (GLIF 1 and 3)

        th_spike_add: Threshold increment following a spike (mV)
        th_spike_decay: Decay rate of the spike component (1/ms)
        voltage_reset_fraction: Fraction f_v of the pre-spike threshold kept
            by the reset, in [0, 1]
        voltage_reset_add: Voltage added at reset (mV)

        th_voltage_index: Coupling a_v of the voltage component to V (1/ms)
        th_voltage_decay: Decay rate b_v of the voltage component (1/ms)

        asc_init: Initial after-spike currents (pA)
        asc_decay: After-spike current decay rates (1/ms)
        asc_amps: After-spike current increments at spike (pA)
        asc_r: Fraction of each current kept at spike, in [0, 1]

        tau_syn: Alpha-function time constant per receptor port (ms)
        E_rev: Reversal potential per receptor port (mV)
    """

    # =========================================================================
    # Passive membrane
    # =========================================================================
    g: float = G_LEAK
    E_L: float = E_LEAK
    V_th: float = V_THRESHOLD
    C_m: float = C_MEMBRANE
    t_ref: float = T_REF
    V_reset: float = V_RESET

    # =========================================================================
    # Spike-dependent threshold and fractional reset (GLIF 2, 4, 5)
    # =========================================================================
    th_spike_add: Optional[float] = None
    th_spike_decay: Optional[float] = None
    voltage_reset_fraction: Optional[float] = None
    voltage_reset_add: Optional[float] = None

    # =========================================================================
    # Voltage-dependent threshold (GLIF 5)
    # =========================================================================
    th_voltage_index: Optional[float] = None
    th_voltage_decay: Optional[float] = None

    # =========================================================================
    # After-spike currents (GLIF 3, 4, 5)
    # =========================================================================
    asc_init: Tuple[float, ...] = ()
    asc_decay: Tuple[float, ...] = ()
    asc_amps: Tuple[float, ...] = ()
    asc_r: Tuple[float, ...] = ()

    # =========================================================================
    # Receptor ports
    # =========================================================================
    tau_syn: Tuple[float, ...] = TAU_SYN
    E_rev: Tuple[float, ...] = E_REV

    _validation_rules = {
        'g': ('positive', 'finite'),
        'E_L': ('finite',),
        'V_th': ('finite',),
        'C_m': ('positive', 'finite'),
        't_ref': ('non_negative', 'finite'),
        'V_reset': ('finite',),
        'th_spike_add': ('finite',),
        'th_spike_decay': ('positive', 'finite'),
        'voltage_reset_fraction': ('range(0.0, 1.0)',),
        'voltage_reset_add': ('finite',),
        'th_voltage_index': ('finite',),
        'th_voltage_decay': ('positive', 'finite'),
        'asc_init': ('finite_elements',),
        'asc_decay': ('positive_elements', 'finite_elements'),
        'asc_amps': ('finite_elements',),
        'asc_r': ('probability_elements',),
        'tau_syn': ('positive_elements', 'finite_elements'),
        'E_rev': ('finite_elements',),
    }

    def __post_init__(self) -> None:
        for name in ARRAY_FIELDS:
            setattr(self, name, _as_float_tuple(getattr(self, name), name))
        self._validate()

    def _validate(self) -> None:
        """Validate single values, then cross-field invariants."""
        self.validate_config()

        _require_complete_group(self, SPIKE_THRESHOLD_FIELDS, "spike-dependent threshold")
        _require_complete_group(self, VOLTAGE_THRESHOLD_FIELDS, "voltage-dependent threshold")

        asc_size = len(self.asc_decay)
        if any(len(getattr(self, name)) != asc_size for name in ASC_FIELDS):
            raise ConfigurationError(
                "All after spike current parameters (asc_init, asc_decay, asc_amps, asc_r) "
                "must have the same size, got sizes "
                f"{[len(getattr(self, name)) for name in ASC_FIELDS]}"
            )

        if len(self.E_rev) != len(self.tau_syn):
            raise ConfigurationError(
                "The reversal potential and synaptic time constant arrays must have the same size, "
                f"got len(E_rev)={len(self.E_rev)} and len(tau_syn)={len(self.tau_syn)}"
            )

        if self.V_reset >= self.V_th:
            raise ConfigurationError(
                f"Reset potential must be smaller than threshold (V_reset={self.V_reset}, V_th={self.V_th})"
            )

        # Raises for illegal flag combinations
        model = self.model

        if model.has_theta_voltage and math.isclose(self.th_voltage_decay, self.g / self.C_m):
            raise ConfigurationError(
                "th_voltage_decay must differ from the membrane rate g / C_m "
                f"({self.g / self.C_m:.6g} 1/ms) for the exact threshold update"
            )

    # =========================================================================
    # Derived quantities
    # =========================================================================

    @property
    def n_receptors(self) -> int:
        """Number of receptor ports (length of tau_syn)."""
        return len(self.tau_syn)

    @property
    def n_asc(self) -> int:
        """Number of after-spike current channels."""
        return len(self.asc_decay)

    @property
    def spike_dependent_threshold(self) -> bool:
        return self.th_spike_decay is not None

    @property
    def after_spike_currents(self) -> bool:
        return self.n_asc > 0

    @property
    def adapting_threshold(self) -> bool:
        return self.th_voltage_decay is not None

    @property
    def mechanism_flags(self) -> MechanismFlags:
        return (
            self.spike_dependent_threshold,
            self.after_spike_currents,
            self.adapting_threshold,
        )

    @property
    def model(self) -> GLIFModel:
        """Mechanism profile selected by the populated parameters."""
        return GLIFModel.from_flags(*self.mechanism_flags)

    def refractory_counts(self, dt_ms: float) -> int:
        """Refractory period in whole simulation steps.

        Raises:
            ConfigurationError: If the rounded step count is negative
        """
        counts = int(round(self.t_ref / dt_ms))
        if counts < 0:
            raise ConfigurationError(
                f"Refractory time t_ref={self.t_ref} ms gives a negative step count ({counts})"
            )
        return counts

    def post_reset_exceeds_threshold(self) -> bool:
        """True if the fractional reset leaves V at or above the post-reset threshold.

        With such parameters the neuron keeps firing after its first spike
        regardless of input (compare E_L + f_v (V_th - E_L) + add against
        V_th + th_spike_add).
        """
        if not self.spike_dependent_threshold:
            return False
        v_after = self.E_L + self.voltage_reset_fraction * (self.V_th - self.E_L) + self.voltage_reset_add
        return v_after >= self.V_th + self.th_spike_add

    def with_updates(self, **updates: Any) -> "GLIFCondConfig":
        """Return a validated copy with ``updates`` overlaid.

        Raises:
            ConfigurationError: If the candidate is invalid (self is unchanged)
        """
        unknown = sorted(set(updates) - set(field_names()))
        if unknown:
            raise ConfigurationError(f"Unknown GLIF parameters: {unknown}")
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (arrays as lists)."""
        d = asdict(self)
        for name in ARRAY_FIELDS:
            d[name] = list(d[name])
        return d


def field_names() -> Tuple[str, ...]:
    """Names of all settable GLIF parameters."""
    return tuple(f.name for f in fields(GLIFCondConfig))


def _require_complete_group(config: GLIFCondConfig, group: Tuple[str, ...], label: str) -> None:
    populated = [name for name in group if getattr(config, name) is not None]
    if populated and len(populated) != len(group):
        missing = [name for name in group if name not in populated]
        raise ConfigurationError(
            f"The {label} mechanism needs all of {list(group)}; missing {missing}"
        )
