"""
Continuous dynamics of the conductance-based GLIF neuron.

State layout (voltages relative to E_L):

    y = [V, dg_0, g_0, dg_1, g_1, ..., dg_{n-1}, g_{n-1}]

    C_m dV/dt   = -g V - sum_i g_i (V + E_L - E_rev_i) + I_e + asc_sum
    d(dg_i)/dt  = -dg_i / tau_i
    dg_i/dt     = dg_i - g_i / tau_i

Each receptor pair is an alpha function: an impulse of w * e / tau into
dg_i makes g_i peak at exactly w, tau ms later. ``I_e`` and ``asc_sum``
are held constant across one simulation step.
"""

from __future__ import annotations

from typing import NamedTuple, Optional, Tuple

import numpy as np
from scipy.integrate import solve_ivp

from glifcond.errors import SolverFailureError

V_INDEX = 0
DG_OFFSET = 1
G_OFFSET = 2
STATES_PER_RECEPTOR = 2


class DynamicsParams(NamedTuple):
    """Read-only inputs of the right-hand side for one step."""

    g: float
    C_m: float
    E_L: float
    E_rev: np.ndarray
    tau_syn: np.ndarray
    I_e: float
    asc_sum: float


def glif_cond_dynamics(t: float, y: np.ndarray, params: DynamicsParams) -> np.ndarray:
    """Time derivative of the flattened state (see module docstring).

    Args:
        t: Time within the step (unused, the system is autonomous per step)
        y: State vector of length 1 + 2 * n_receptors
        params: Constants of this step

    Returns:
        dy/dt with the same layout as ``y``
    """
    V = y[V_INDEX]
    dg = y[DG_OFFSET::STATES_PER_RECEPTOR]
    g_syn = y[G_OFFSET::STATES_PER_RECEPTOR]

    I_syn = np.sum(g_syn * (V + params.E_L - params.E_rev))
    I_leak = params.g * V

    f = np.empty_like(y)
    f[V_INDEX] = (-I_leak - I_syn + params.I_e + params.asc_sum) / params.C_m
    f[DG_OFFSET::STATES_PER_RECEPTOR] = -dg / params.tau_syn
    f[G_OFFSET::STATES_PER_RECEPTOR] = dg - g_syn / params.tau_syn
    return f


def integrate_step(
    y0: np.ndarray,
    params: DynamicsParams,
    dt_ms: float,
    method: str,
    atol: float,
    rtol: float,
    first_step: Optional[float] = None,
    step: int = 0,
) -> Tuple[np.ndarray, Optional[float]]:
    """Advance ``y0`` across one simulation step with ``solve_ivp``.

    Args:
        y0: State at the start of the step
        params: Constants of this step
        dt_ms: Step duration (ms)
        method: Adaptive explicit method ('RK45', 'RK23', 'DOP853')
        atol: Absolute tolerance
        rtol: Relative tolerance
        first_step: Initial internal step, usually the one returned by the
            previous call; None lets the solver pick
        step: Simulation step index, used in the error message

    Returns:
        (y at t = dt_ms, internal step size to start the next call with)

    Raises:
        SolverFailureError: If the state is not finite or the solver does not
            reach the end of the step
    """
    if not np.all(np.isfinite(y0)):
        raise SolverFailureError(step, "initial state is not finite")
    if first_step is not None:
        first_step = min(first_step, dt_ms)

    sol = solve_ivp(
        glif_cond_dynamics,
        (0.0, dt_ms),
        y0,
        method=method,
        atol=atol,
        rtol=rtol,
        first_step=first_step,
        args=(params,),
    )
    if not sol.success:
        raise SolverFailureError(step, sol.message)

    y_end = sol.y[:, -1]
    if not np.all(np.isfinite(y_end)):
        raise SolverFailureError(step, "state became non-finite")

    # The final internal step is cut short at t = dt_ms; carry the largest one
    next_step = float(np.diff(sol.t).max()) if sol.t.size > 1 else first_step
    return y_end, next_step
