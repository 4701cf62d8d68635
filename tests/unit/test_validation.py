"""Tests for the declarative validation framework and SimulationConfig."""

from dataclasses import dataclass

import pytest
import torch

from glifcond.config import SimulationConfig, ValidatedConfig, ValidatorRegistry
from glifcond.errors import ConfigurationError


@pytest.mark.unit
class TestValidatorRegistry:

    def test_positive(self):
        validator = ValidatorRegistry.get_validator("positive")
        validator(0.5, "C_m")
        with pytest.raises(ConfigurationError, match="C_m"):
            validator(0.0, "C_m")

    def test_bool_is_not_numeric(self):
        with pytest.raises(ConfigurationError, match="numeric"):
            ValidatorRegistry.get_validator("finite")(True, "g")

    def test_range_rule(self):
        validator = ValidatorRegistry.get_validator("range(0.0, 2.0)")
        validator(1.5, "x")
        with pytest.raises(ConfigurationError, match="outside valid range"):
            validator(2.5, "x")

    def test_elementwise_rule_names_offending_index(self):
        validator = ValidatorRegistry.get_validator("positive_elements")
        with pytest.raises(ConfigurationError, match=r"tau_syn\[1\]"):
            validator((0.2, -1.0), "tau_syn")

    def test_unknown_rule(self):
        with pytest.raises(ValueError, match="Unknown validation rule"):
            ValidatorRegistry.get_validator("even")

    def test_positive_integer_rejects_float(self):
        with pytest.raises(ConfigurationError, match="integer"):
            ValidatorRegistry.get_validator("positive_integer")(2.0, "max_delay_steps")


@dataclass
class _ExampleConfig(ValidatedConfig):
    rate: float = 1.0
    fraction: float = 0.5
    optional: object = None

    _validation_rules = {
        "rate": ("positive",),
        "fraction": ("probability",),
        "optional": ("positive",),
    }


@pytest.mark.unit
class TestValidatedConfig:

    def test_valid_config_passes(self):
        _ExampleConfig().validate_config()

    def test_none_fields_are_skipped(self):
        _ExampleConfig(optional=None).validate_config()

    def test_all_errors_collected(self):
        config = _ExampleConfig(rate=-1.0, fraction=2.0)
        with pytest.raises(ConfigurationError) as exc_info:
            config.validate_config()

        message = str(exc_info.value)
        assert "rate" in message
        assert "fraction" in message


@pytest.mark.unit
class TestSimulationConfig:

    def test_defaults(self):
        config = SimulationConfig()

        assert config.dt_ms == 0.1
        assert config.ode_method == "RK45"
        assert config.get_torch_dtype() == torch.float64
        assert config.get_torch_device() == torch.device("cpu")

    @pytest.mark.parametrize(
        "overrides",
        [
            dict(dt_ms=0.0),
            dict(dt_ms=-0.1),
            dict(max_delay_steps=0),
            dict(ode_atol=0.0),
            dict(ode_method="LSODA"),
            dict(dtype="int32"),
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ConfigurationError):
            SimulationConfig(**overrides)

    def test_dict_round_trip(self):
        config = SimulationConfig(dt_ms=0.05, ode_method="DOP853")
        assert SimulationConfig.from_dict(config.to_dict()) == config
