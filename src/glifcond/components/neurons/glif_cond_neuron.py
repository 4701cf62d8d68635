"""Conductance-Based Generalized Leaky Integrate-and-Fire (GLIF) Neuron.

Single-neuron engine for the five GLIF mechanism profiles of Teeter et al.
(2018), with alpha-function synaptic conductances on any number of
receptor ports.

**Membrane Dynamics** (voltages relative to E_L):
=================================================
.. math::

    C_m \\frac{dV}{dt} = -g V - \\sum_i g_i (V + E_L - E_{rev,i}) + I_e + \\sum_j I_j

The voltage and the receptor conductances are advanced with an adaptive
Runge-Kutta stepper (``scipy.integrate.solve_ivp``) across each step. The
threshold components and after-spike currents use exact per-step decay
factors cached in :class:`GLIFCoefficients`.

**Spike Generation**:
When the neuron is not refractory and V ≥ threshold (checked once per step):
- Record the spike
- Reset: V → reset_fraction · threshold + reset_add
- Spike component: theta_s → theta_s · exp(-b_s t_ref) + th_spike_add
- After-spike currents: I_j → r_j · I_j · exp(-k_j t_ref) + ΔI_j
- Hold V, theta_s and I_j for refractory_counts steps

**Usage**:
==========
    neuron = create_lif_r_asc_a()
    neuron.handle_spike(port=0, weight=50.0, delay_steps=1)
    recorder = neuron.connect_logging_device(["V_m", "threshold"])
    spike_steps = neuron.run(1000)
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional, Sequence

import numpy as np
import torch
import torch.nn as nn

from glifcond.components.neurons.glif_coefficients import GLIFCoefficients, calibrate_coefficients
from glifcond.components.neurons.glif_dynamics import DynamicsParams, integrate_step
from glifcond.components.neurons.glif_state import DG_COLUMN, GLIFCondState
from glifcond.config.glif_config import RECEPTOR_FIELDS, GLIFCondConfig, GLIFModel, field_names
from glifcond.config.simulation_config import SimulationConfig
from glifcond.diagnostics.recordables import DataLogger, RecordablesMap
from glifcond.errors import ConfigurationError, UnknownReceptorTypeError
from glifcond.mixins.resettable_mixin import ResettableMixin
from glifcond.utils.delay_buffer import AccumulatingDelayBuffer

logger = logging.getLogger(__name__)

MODEL_NAME = "glif_cond"

FIXED_RECORDABLES = (
    "V_m",
    "I",
    "ASCurrents_sum",
    "threshold",
    "threshold_spike",
    "threshold_voltage",
)

READ_ONLY_KEYS = (
    "spike_dependent_threshold",
    "after_spike_currents",
    "adapting_threshold",
    "model",
    "n_receptors",
    "threshold",
    "recordables",
    "t_spike",
)
"""Reported by get_status(); set_status() accepts them only unchanged."""

STATE_KEYS = ("V_m", "ASCurrents", "threshold_spike", "threshold_voltage")


def conductance_recordable(port: int) -> str:
    """Recordable name of the conductance on receptor ``port``."""
    return f"g_{port}"


def recordable_names(n_receptors: int) -> List[str]:
    """All recordable names of a neuron with ``n_receptors`` ports, in order."""
    return list(FIXED_RECORDABLES) + [conductance_recordable(p) for p in range(n_receptors)]


def _same_value(a: Any, b: Any) -> bool:
    if isinstance(a, (int, float)) and isinstance(b, (int, float)) and not isinstance(a, bool):
        return math.isclose(a, b, rel_tol=1e-12, abs_tol=1e-12)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        return list(a) == list(b)
    return a == b


class GLIFCond(ResettableMixin, nn.Module):
    """Conductance-based GLIF neuron (GLIF 1-5) with N alpha-synapse ports.

    Key features:
    - Mechanism profile selected by which parameters are populated
    - Adaptive ODE integration of V and receptor conductances
    - Two-component adaptive threshold (spike and voltage dependent)
    - After-spike currents
    - Delayed spike/current inputs summed into per-step accumulators
    - Validated, all-or-nothing reconfiguration (set_status)

    Args:
        config: GLIFCondConfig with the neuron parameters (defaults to LIF)
        sim_config: SimulationConfig with step size, delay horizon and
            stepper settings
    """

    def __init__(
        self,
        config: Optional[GLIFCondConfig] = None,
        sim_config: Optional[SimulationConfig] = None,
    ):
        super().__init__()
        self.config = config or GLIFCondConfig()
        self.sim_config = sim_config or SimulationConfig()
        self.device = self.sim_config.get_torch_device()

        # State variables
        self.state = GLIFCondState.initial(self.config, device=self.device)

        # Event accumulators: one column per receptor port, one for current
        buffer_dtype = self.sim_config.get_torch_dtype()
        self.spike_buffer = AccumulatingDelayBuffer(
            self.sim_config.max_delay_steps, self.config.n_receptors, str(self.device), buffer_dtype,
        )
        self.current_buffer = AccumulatingDelayBuffer(
            self.sim_config.max_delay_steps, 1, str(self.device), buffer_dtype,
        )

        self.recordables = RecordablesMap()
        self._register_recordables()
        self.loggers: List[DataLogger] = []

        # Cached coefficients (computed via update_temporal_parameters)
        self.coeffs: Optional[GLIFCoefficients] = None
        self._dt_ms: Optional[float] = None
        self._ode_step: Optional[float] = None
        self._set_receptor_arrays()

        # Spike archive and clock
        self.step_count = 0
        self.time_ms = 0.0
        self.spike_steps: List[int] = []
        self.spike_times: List[float] = []
        self.has_connections = False

        if self.config.post_reset_exceeds_threshold():
            _warn_pathological_reset(self.config)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def model(self) -> GLIFModel:
        return self.config.model

    @property
    def n_receptors(self) -> int:
        return self.config.n_receptors

    @property
    def t_spike(self) -> float:
        """Time of the last spike (ms), -1.0 before the first spike."""
        return self.spike_times[-1] if self.spike_times else -1.0

    # =========================================================================
    # CALIBRATION
    # =========================================================================

    def update_temporal_parameters(self, dt_ms: float) -> None:
        """Recompute cached coefficients for a (new) timestep.

        Args:
            dt_ms: Timestep in milliseconds

        Raises:
            ConfigurationError: If dt_ms is not positive
        """
        if dt_ms != self.sim_config.dt_ms:
            self.sim_config = replace(self.sim_config, dt_ms=dt_ms)
        self.coeffs = calibrate_coefficients(self.config, dt_ms, device=self.device)
        self._dt_ms = dt_ms
        self._ode_step = None

    def _set_receptor_arrays(self) -> None:
        self._E_rev = np.asarray(self.config.E_rev, dtype=np.float64)
        self._tau_syn = np.asarray(self.config.tau_syn, dtype=np.float64)

    # =========================================================================
    # UPDATE
    # =========================================================================

    @torch.no_grad()
    def forward(self) -> bool:
        """Advance the neuron by one timestep.

        Returns:
            True if the neuron spiked during this step

        Raises:
            SolverFailureError: If the ODE stepper fails
        """
        if self._dt_ms is None:
            self.update_temporal_parameters(self.sim_config.dt_ms)

        c = self.coeffs
        s = self.state
        step = self.step_count
        dt_ms = self._dt_ms

        # Deliver this step's events
        weights = self.spike_buffer.pop().to(dtype=torch.float64)
        s.receptors[:, DG_COLUMN] += weights * c.cond_initial_values
        s.I = float(self.current_buffer.pop()[0].item())

        refractory = s.refractory_steps > 0

        # Step-averaged after-spike current drives V during the step
        s.asc_sum = float((c.asc_stable_coeffs * s.asc).sum().item())

        v_old = s.V_m
        params = DynamicsParams(
            g=self.config.g,
            C_m=self.config.C_m,
            E_L=self.config.E_L,
            E_rev=self._E_rev,
            tau_syn=self._tau_syn,
            I_e=s.I,
            asc_sum=s.asc_sum,
        )
        y, self._ode_step = integrate_step(
            s.as_vector(),
            params,
            dt_ms,
            method=self.sim_config.ode_method,
            atol=self.sim_config.ode_atol,
            rtol=self.sim_config.ode_rtol,
            first_step=self._ode_step,
            step=step,
        )
        s.load_vector(y)

        if refractory:
            # V is clamped; the voltage component relaxes towards (a_v / b_v) V.
            # Spike component and after-spike currents are held.
            s.V_m = v_old
            s.refractory_steps -= 1
            beta = v_old
            drive = 0.0
        else:
            # Passive relaxation of V towards beta over the step
            beta = (s.I + s.asc_sum) / self.config.g
            drive = c.phi * (v_old - beta)
            s.asc = s.asc * c.asc_decay_rates
            s.threshold_spike *= c.theta_spike_decay_rate

        s.threshold_voltage = (
            drive * c.potential_decay_rate
            + c.theta_voltage_decay_rate_inverse * (s.threshold_voltage - drive - c.abpara_ratio_voltage * beta)
            + c.abpara_ratio_voltage * beta
        )
        s.threshold = s.threshold_spike + s.threshold_voltage + c.th_inf

        self.step_count += 1
        self.time_ms += dt_ms

        spiked = (not refractory) and s.V_m >= s.threshold
        if spiked:
            self.spike_steps.append(step)
            self.spike_times.append(self.time_ms)

            s.V_m = c.reset_fraction * s.threshold + c.reset_add
            # Decay over the coming refractory period is applied up front
            s.threshold_spike = s.threshold_spike * c.theta_spike_refractory_decay_rate + c.theta_spike_add
            s.asc = c.asc_r * s.asc * c.asc_refractory_decay_rates + c.asc_amps
            s.refractory_steps = c.refractory_counts
            s.threshold = s.threshold_spike + s.threshold_voltage + c.th_inf

        for data_logger in self.loggers:
            data_logger.record(step)

        return spiked

    def run(self, n_steps: int) -> List[int]:
        """Advance ``n_steps`` steps.

        Returns:
            Step indices at which the neuron spiked during this run
        """
        if n_steps < 0:
            raise ValueError(f"n_steps must be >= 0, got {n_steps}")
        spikes = []
        for _ in range(n_steps):
            step = self.step_count
            if self.forward():
                spikes.append(step)
        return spikes

    # =========================================================================
    # EVENT INPUTS
    # =========================================================================

    def _check_port(self, port: int) -> None:
        if isinstance(port, bool) or not isinstance(port, (int, np.integer)):
            raise UnknownReceptorTypeError(port, self.n_receptors, MODEL_NAME)
        if not 0 <= port < self.n_receptors:
            raise UnknownReceptorTypeError(port, self.n_receptors, MODEL_NAME)

    def handle_spike(
        self,
        port: int,
        weight: float,
        delay_steps: int = 0,
        multiplicity: int = 1,
    ) -> None:
        """Schedule a spike of ``weight`` on receptor ``port``.

        The conductance of the port peaks at ``weight * multiplicity`` (nS)
        tau_syn ms after delivery.

        Args:
            port: Receptor port in [0, n_receptors)
            weight: Synaptic weight (nS)
            delay_steps: Steps until delivery (0 = next forward())
            multiplicity: Number of coincident spikes

        Raises:
            UnknownReceptorTypeError: If the port does not exist
            ValueError: If the delay exceeds the accumulator horizon
        """
        self._check_port(port)
        self.spike_buffer.add_value(delay_steps, int(port), weight * multiplicity)

    def handle_current(
        self,
        current: float,
        weight: float = 1.0,
        delay_steps: int = 0,
        port: int = 0,
    ) -> None:
        """Schedule ``weight * current`` (pA) to be applied during one step."""
        if port != 0:
            raise UnknownReceptorTypeError(port, 1, MODEL_NAME)
        self.current_buffer.add_value(delay_steps, 0, weight * current)

    def connect(self, port: int) -> int:
        """Connection-time check of a spike port.

        After the first successful connect() the receptor count can no
        longer be reduced.

        Returns:
            The accepted port
        """
        self._check_port(port)
        self.has_connections = True
        return int(port)

    def connect_logging_device(
        self,
        record_from: Sequence[str],
        port: int = 0,
        interval_steps: int = 1,
    ) -> DataLogger:
        """Attach a DataLogger sampling ``record_from`` after every step.

        Raises:
            UnknownReceptorTypeError: If port is not 0
            UnknownRecordableError: If a requested channel does not exist
        """
        if port != 0:
            raise UnknownReceptorTypeError(port, 1, MODEL_NAME)
        data_logger = DataLogger(self.recordables, record_from, interval_steps)
        self.loggers.append(data_logger)
        return data_logger

    # =========================================================================
    # RECORDABLES
    # =========================================================================

    def _register_recordables(self) -> None:
        r = self.recordables
        r.insert("V_m", lambda: self.state.V_m + self.config.E_L)
        r.insert("I", lambda: self.state.I)
        r.insert("ASCurrents_sum", lambda: self.state.asc_sum)
        r.insert("threshold", lambda: self.state.threshold + self.config.E_L)
        r.insert("threshold_spike", lambda: self.state.threshold_spike)
        r.insert("threshold_voltage", lambda: self.state.threshold_voltage)
        for port in range(self.config.n_receptors):
            self._insert_conductance_recordable(port)

    def _insert_conductance_recordable(self, port: int) -> None:
        self.recordables.insert(conductance_recordable(port), lambda: self.state.conductance(port))

    def _sync_conductance_recordables(self, n_old: int, n_new: int) -> None:
        for port in range(n_old, n_new):
            self._insert_conductance_recordable(port)
        for port in range(n_new, n_old):
            self.recordables.erase(conductance_recordable(port))

    # =========================================================================
    # STATUS
    # =========================================================================

    def get_status(self) -> Dict[str, Any]:
        """Parameters, derived flags, state and recordables as a dict.

        Voltages (E_L, V_th, V_reset, V_m, threshold) are absolute.
        """
        config = self.config
        s = self.state
        status = config.to_dict()
        status.update(
            spike_dependent_threshold=config.spike_dependent_threshold,
            after_spike_currents=config.after_spike_currents,
            adapting_threshold=config.adapting_threshold,
            model=config.model.name,
            n_receptors=config.n_receptors,
            V_m=s.V_m + config.E_L,
            ASCurrents=s.asc.tolist(),
            threshold=s.threshold + config.E_L,
            threshold_spike=s.threshold_spike,
            threshold_voltage=s.threshold_voltage,
            recordables=self.recordables.get_list(),
            t_spike=self.t_spike,
        )
        return status

    def set_status(self, updates: Mapping[str, Any]) -> None:
        """Validate and apply parameter and state updates atomically.

        Parameters are absolute, like in get_status(). All checks run on a
        candidate config and a copy of the state; if any check fails the
        neuron is left exactly as it was.

        Raises:
            ConfigurationError: For unknown keys, invalid values, illegal
                mechanism combinations, changed read-only values, state keys
                for disabled mechanisms, or a receptor count change that is
                not allowed
        """
        updates = dict(updates)
        params = set(field_names())
        unknown = sorted(set(updates) - params - set(READ_ONLY_KEYS) - set(STATE_KEYS))
        if unknown:
            raise ConfigurationError(f"Unknown {MODEL_NAME} status keys: {unknown}")

        old = self.config
        n_old = old.n_receptors
        param_updates = {k: v for k, v in updates.items() if k in params}

        given = [k for k in RECEPTOR_FIELDS if k in param_updates]
        if len(given) == 1:
            try:
                n_given = len(param_updates[given[0]])
            except TypeError:
                n_given = n_old  # the candidate reports the bad value
            if n_given != n_old:
                raise ConfigurationError(
                    "Changing the number of receptor ports requires both tau_syn and E_rev"
                )

        candidate = old.with_updates(**param_updates)
        n_new = candidate.n_receptors

        if n_new < n_old:
            if self.has_connections:
                raise ConfigurationError(
                    f"Cannot reduce the number of receptor ports ({n_old} -> {n_new}) "
                    "after connections were made"
                )
            dropped = {conductance_recordable(p) for p in range(n_new, n_old)}
            for data_logger in self.loggers:
                recorded = dropped.intersection(data_logger.record_from)
                if recorded:
                    raise ConfigurationError(
                        f"Cannot remove recordables {sorted(recorded)} while a data logger records them"
                    )

        state = self._candidate_state(candidate, updates)
        coeffs = calibrate_coefficients(candidate, self.sim_config.dt_ms, device=self.device)

        derived = {
            "spike_dependent_threshold": candidate.spike_dependent_threshold,
            "after_spike_currents": candidate.after_spike_currents,
            "adapting_threshold": candidate.adapting_threshold,
            "model": candidate.model.name,
            "n_receptors": n_new,
            "threshold": state.threshold + candidate.E_L,
            "recordables": recordable_names(n_new),
            "t_spike": self.t_spike,
        }
        for key in READ_ONLY_KEYS:
            if key not in updates:
                continue
            value = updates[key]
            if isinstance(value, GLIFModel):
                value = value.name
            if not _same_value(value, derived[key]):
                raise ConfigurationError(
                    f"'{key}' is read-only (would be {derived[key]!r}, got {updates[key]!r})"
                )

        # Commit
        self.config = candidate
        self.state = state
        self.coeffs = coeffs
        self._dt_ms = self.sim_config.dt_ms
        self._ode_step = None
        self._set_receptor_arrays()
        if n_new != n_old:
            self.spike_buffer.resize(n_new)
            self._sync_conductance_recordables(n_old, n_new)
            logger.info("%s: receptor ports changed from %d to %d", MODEL_NAME, n_old, n_new)

        if candidate.post_reset_exceeds_threshold():
            _warn_pathological_reset(candidate)

    def _candidate_state(self, candidate: GLIFCondConfig, updates: Mapping[str, Any]) -> GLIFCondState:
        """Copy of the current state adjusted to ``candidate`` and ``updates``."""
        state = self.state.copy()
        old = self.config

        if "V_m" in updates:
            state.V_m = _as_float(updates["V_m"], "V_m") - candidate.E_L
        else:
            # Keep the absolute potential when E_L moves
            state.V_m -= candidate.E_L - old.E_L

        # State values of a disabled mechanism are accepted only when neutral
        if "ASCurrents" in updates:
            values = _as_float_list(updates["ASCurrents"], "ASCurrents")
            if not candidate.after_spike_currents and values:
                raise ConfigurationError("ASCurrents can only be set when after-spike currents are enabled")
            if len(values) != candidate.n_asc:
                raise ConfigurationError(
                    f"ASCurrents must have {candidate.n_asc} elements, got {len(values)}"
                )
            state.asc = torch.tensor(values, dtype=torch.float64, device=self.device).reshape(-1)
            state.asc_sum = float(state.asc.sum().item())
        elif state.n_asc != candidate.n_asc:
            state.asc = torch.tensor(candidate.asc_init, dtype=torch.float64, device=self.device).reshape(-1)
            state.asc_sum = float(state.asc.sum().item())

        if "threshold_spike" in updates:
            value = _as_float(updates["threshold_spike"], "threshold_spike")
            if not candidate.spike_dependent_threshold and value != 0.0:
                raise ConfigurationError(
                    "threshold_spike can only be set when the spike-dependent threshold is enabled"
                )
            state.threshold_spike = value
        elif not candidate.spike_dependent_threshold:
            state.threshold_spike = 0.0

        if "threshold_voltage" in updates:
            value = _as_float(updates["threshold_voltage"], "threshold_voltage")
            if not candidate.adapting_threshold and value != 0.0:
                raise ConfigurationError(
                    "threshold_voltage can only be set when the voltage-dependent threshold is enabled"
                )
            state.threshold_voltage = value
        elif not candidate.adapting_threshold:
            state.threshold_voltage = 0.0

        state.resize_receptors(candidate.n_receptors)
        state.threshold = state.threshold_spike + state.threshold_voltage + (candidate.V_th - candidate.E_L)
        return state

    # =========================================================================
    # RESET
    # =========================================================================

    def reset_state(self) -> None:
        """Return to the resting state; parameters and connections are kept."""
        self.state = GLIFCondState.initial(self.config, device=self.device)
        self.reset_event_buffers(["spike_buffer", "current_buffer"])
        self.step_count = 0
        self.time_ms = 0.0
        self.spike_steps.clear()
        self.spike_times.clear()
        self._ode_step = None
        for data_logger in self.loggers:
            data_logger.clear()


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be numeric, got bool")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be numeric, got {value!r}") from None
    if not math.isfinite(result):
        raise ConfigurationError(f"{name}={result} must be finite")
    return result


def _as_float_list(values: Any, name: str) -> List[float]:
    if isinstance(values, (str, bytes)):
        raise ConfigurationError(f"{name} must be a sequence of numbers, got {values!r}")
    if hasattr(values, "tolist"):
        values = values.tolist()
    try:
        items = list(values)
    except TypeError:
        raise ConfigurationError(f"{name} must be a sequence of numbers, got {values!r}") from None
    return [_as_float(v, name) for v in items]


def _warn_pathological_reset(config: GLIFCondConfig) -> None:
    logger.warning(
        "%s: the fractional reset leaves V at or above the post-reset threshold "
        "(voltage_reset_fraction=%s, voltage_reset_add=%s); the neuron will keep "
        "spiking once it has spiked",
        MODEL_NAME, config.voltage_reset_fraction, config.voltage_reset_add,
    )

