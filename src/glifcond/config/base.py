"""
Base Configuration Classes.

This module provides the base configuration class with the tensor
placement fields shared by every config in glifcond.
"""

from __future__ import annotations

from dataclasses import dataclass

import torch


@dataclass
class BaseConfig:
    """Base configuration with common fields for all components.

    - device: Hardware device for state tensors and event accumulators
    - dtype: Tensor data type (the ODE state is integrated in float64)
    """

    device: str = "cpu"
    """Device to run on: 'cpu', 'cuda', 'cuda:0', etc."""

    dtype: str = "float64"
    """Data type for state tensors: 'float64' or 'float32'."""

    def get_torch_device(self) -> torch.device:
        """Get PyTorch device object."""
        return torch.device(self.device)

    def get_torch_dtype(self) -> torch.dtype:
        """Get PyTorch dtype object."""
        dtype_map = {
            "float32": torch.float32,
            "float64": torch.float64,
        }
        if self.dtype not in dtype_map:
            raise ValueError(
                f"Unknown dtype '{self.dtype}'. "
                f"Choose from: {list(dtype_map.keys())}"
            )
        return dtype_map[self.dtype]
