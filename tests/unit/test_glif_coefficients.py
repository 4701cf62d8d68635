"""Tests for cached GLIF coefficients."""

import math

import pytest
import torch

from glifcond.components.neurons.glif_coefficients import calibrate_coefficients
from glifcond.components.neurons.neuron_factory import glif_config
from glifcond.config.glif_config import GLIFCondConfig, GLIFModel
from glifcond.errors import ConfigurationError


@pytest.mark.unit
class TestNeutralCoefficients:
    """Disabled mechanisms get coefficients that leave their state unchanged."""

    def test_lif_has_neutral_threshold_and_empty_asc(self):
        c = calibrate_coefficients(GLIFCondConfig(V_reset=-70.0), 0.1)

        assert c.theta_spike_add == 0.0
        assert c.theta_spike_decay_rate == 1.0
        assert c.theta_spike_refractory_decay_rate == 1.0
        assert c.theta_voltage_decay_rate_inverse == 1.0
        assert c.abpara_ratio_voltage == 0.0
        assert c.phi == 0.0
        assert c.n_asc == 0

    def test_lif_resets_to_v_reset(self):
        c = calibrate_coefficients(GLIFCondConfig(V_reset=-70.0, E_L=-78.85), 0.1)

        assert c.reset_fraction == 0.0
        assert c.reset_add == pytest.approx(8.85)

    def test_lif_asc_resets_to_v_reset(self):
        config = glif_config(GLIFModel.LIF_ASC, V_reset=-75.0)
        c = calibrate_coefficients(config, 0.1)

        assert c.reset_fraction == 0.0
        assert c.reset_add == pytest.approx(-75.0 - config.E_L)


@pytest.mark.unit
class TestGLIF5Coefficients:

    @pytest.fixture
    def config(self):
        return glif_config(GLIFModel.LIF_R_ASC_A, t_ref=2.05)

    def test_fractional_reset(self, config):
        c = calibrate_coefficients(config, 0.1)

        assert c.reset_fraction == config.voltage_reset_fraction
        assert c.reset_add == config.voltage_reset_add

    def test_refractory_rates_cover_whole_period(self, config):
        c = calibrate_coefficients(config, 0.1)

        assert c.refractory_counts == 20
        assert c.theta_spike_refractory_decay_rate == pytest.approx(
            math.exp(-config.th_spike_decay * config.t_ref)
        )
        torch.testing.assert_close(
            c.asc_refractory_decay_rates,
            torch.exp(-torch.tensor(config.asc_decay, dtype=torch.float64) * config.t_ref),
        )
        assert c.theta_spike_refractory_decay_rate < c.theta_spike_decay_rate

    def test_normal_decay_rates(self, config):
        dt = 0.1
        c = calibrate_coefficients(config, dt)
        k = torch.tensor(config.asc_decay, dtype=torch.float64)

        assert c.theta_spike_decay_rate == pytest.approx(math.exp(-config.th_spike_decay * dt))
        assert c.theta_voltage_decay_rate_inverse == pytest.approx(math.exp(-config.th_voltage_decay * dt))
        assert c.potential_decay_rate == pytest.approx(math.exp(-config.g / config.C_m * dt))
        torch.testing.assert_close(c.asc_decay_rates, torch.exp(-k * dt))
        torch.testing.assert_close(c.asc_stable_coeffs, (1 - torch.exp(-k * dt)) / (k * dt))

    def test_voltage_component_ratios(self, config):
        c = calibrate_coefficients(config, 0.1)
        a_v, b_v = config.th_voltage_index, config.th_voltage_decay

        assert c.abpara_ratio_voltage == pytest.approx(a_v / b_v)
        assert c.phi == pytest.approx(a_v / (b_v - config.g / config.C_m))

    def test_threshold_offset(self, config):
        c = calibrate_coefficients(config, 0.1)
        assert c.th_inf == pytest.approx(config.V_th - config.E_L)

    def test_alpha_impulse_per_unit_weight(self, config):
        c = calibrate_coefficients(config, 0.1)
        expected = math.e / torch.tensor(config.tau_syn, dtype=torch.float64)

        torch.testing.assert_close(c.cond_initial_values, expected)
        assert c.n_receptors == 2


@pytest.mark.unit
class TestCalibrationEdgeCases:

    def test_zero_refractory_period_has_unit_refractory_rates(self):
        c = calibrate_coefficients(glif_config(GLIFModel.LIF_ASC, t_ref=0.0), 0.1)

        assert c.refractory_counts == 0
        assert c.theta_spike_refractory_decay_rate == 1.0
        torch.testing.assert_close(c.asc_refractory_decay_rates, torch.ones(2, dtype=torch.float64))

    @pytest.mark.parametrize("dt_ms", [0.0, -0.1])
    def test_non_positive_dt_rejected(self, dt_ms):
        with pytest.raises(ConfigurationError):
            calibrate_coefficients(GLIFCondConfig(), dt_ms)

    def test_coefficients_follow_dt(self):
        config = glif_config(GLIFModel.LIF_R, t_ref=2.0)
        coarse = calibrate_coefficients(config, 0.2)
        fine = calibrate_coefficients(config, 0.1)

        assert coarse.refractory_counts == 10
        assert fine.refractory_counts == 20
        assert coarse.theta_spike_decay_rate == pytest.approx(fine.theta_spike_decay_rate ** 2)
