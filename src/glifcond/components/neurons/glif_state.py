"""
Dynamic state of one conductance-based GLIF neuron.

All voltages (``V_m`` and the threshold fields) are relative to E_L.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
import torch

from glifcond.components.neurons.glif_dynamics import STATES_PER_RECEPTOR, V_INDEX
from glifcond.config.glif_config import GLIFCondConfig

DG_COLUMN = 0
G_COLUMN = 1


@dataclass
class GLIFCondState:
    """Membrane, threshold, after-spike current and receptor state.

    Attributes:
        V_m: Membrane potential relative to E_L (mV)
        receptors: [n_receptors, 2] tensor, column 0 = dg (alpha auxiliary),
            column 1 = g (conductance, nS)
        asc: [n_asc] after-spike currents (pA)
        asc_sum: Step-averaged sum of after-spike currents of the last step (pA)
        threshold: Composite threshold relative to E_L (mV)
        threshold_spike: Spike component of the threshold (mV)
        threshold_voltage: Voltage component of the threshold (mV)
        refractory_steps: Remaining refractory steps
        I: External current applied during the last step (pA)
    """

    V_m: float = 0.0
    receptors: torch.Tensor = field(default_factory=lambda: torch.zeros(0, 2, dtype=torch.float64))
    asc: torch.Tensor = field(default_factory=lambda: torch.zeros(0, dtype=torch.float64))
    asc_sum: float = 0.0
    threshold: float = 0.0
    threshold_spike: float = 0.0
    threshold_voltage: float = 0.0
    refractory_steps: int = 0
    I: float = 0.0

    @classmethod
    def initial(
        cls,
        config: GLIFCondConfig,
        device: torch.device | str = "cpu",
    ) -> "GLIFCondState":
        """Resting state for ``config``: V at E_L, no conductance, ASC at asc_init."""
        asc = torch.tensor(config.asc_init, dtype=torch.float64, device=device).reshape(-1)
        return cls(
            V_m=0.0,
            receptors=torch.zeros(config.n_receptors, 2, dtype=torch.float64, device=device),
            asc=asc,
            asc_sum=float(asc.sum().item()),
            threshold=config.V_th - config.E_L,
        )

    @property
    def n_receptors(self) -> int:
        return int(self.receptors.shape[0])

    @property
    def n_asc(self) -> int:
        return int(self.asc.shape[0])

    def conductance(self, port: int) -> float:
        """Conductance of receptor ``port`` (nS)."""
        return float(self.receptors[port, G_COLUMN].item())

    def copy(self) -> "GLIFCondState":
        """Independent copy, used as a scratch state for validated updates."""
        return GLIFCondState(
            V_m=self.V_m,
            receptors=self.receptors.clone(),
            asc=self.asc.clone(),
            asc_sum=self.asc_sum,
            threshold=self.threshold,
            threshold_spike=self.threshold_spike,
            threshold_voltage=self.threshold_voltage,
            refractory_steps=self.refractory_steps,
            I=self.I,
        )

    def as_vector(self) -> np.ndarray:
        """Flatten to the ODE layout [V, dg_0, g_0, dg_1, g_1, ...]."""
        y = np.empty(1 + STATES_PER_RECEPTOR * self.n_receptors, dtype=np.float64)
        y[V_INDEX] = self.V_m
        y[1:] = self.receptors.detach().cpu().numpy().reshape(-1)
        return y

    def load_vector(self, y: np.ndarray) -> None:
        """Write an ODE-layout vector back into the state."""
        expected = 1 + STATES_PER_RECEPTOR * self.n_receptors
        if y.shape[0] != expected:
            raise ValueError(f"State vector has length {y.shape[0]}, expected {expected}")
        self.V_m = float(y[V_INDEX])
        self.receptors.copy_(
            torch.from_numpy(np.ascontiguousarray(y[1:])).reshape(self.n_receptors, STATES_PER_RECEPTOR)
        )

    def resize_receptors(self, n_receptors: int) -> None:
        """Truncate trailing receptor pairs or append zero pairs."""
        if n_receptors < 0:
            raise ValueError(f"n_receptors must be >= 0, got {n_receptors}")
        current = self.n_receptors
        if n_receptors == current:
            return
        if n_receptors < current:
            self.receptors = self.receptors[:n_receptors].clone()
        else:
            extra = torch.zeros(
                n_receptors - current, STATES_PER_RECEPTOR,
                dtype=self.receptors.dtype, device=self.receptors.device,
            )
            self.receptors = torch.cat([self.receptors, extra], dim=0)
