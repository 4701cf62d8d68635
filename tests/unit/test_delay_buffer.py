"""Tests for AccumulatingDelayBuffer."""

import pytest
import torch

from glifcond.utils.delay_buffer import AccumulatingDelayBuffer


@pytest.mark.unit
class TestAccumulatingDelayBuffer:

    def test_initial_state(self):
        buffer = AccumulatingDelayBuffer(max_delay=5, size=3)

        assert buffer.buffer.shape == (6, 3)
        assert buffer.buffer.dtype == torch.float64
        assert buffer.ptr == 0
        assert torch.all(buffer.pop() == 0)

    def test_zero_delay_is_delivered_by_next_pop(self):
        buffer = AccumulatingDelayBuffer(max_delay=5, size=2)
        buffer.add_value(0, 1, 2.5)

        torch.testing.assert_close(buffer.pop(), torch.tensor([0.0, 2.5], dtype=torch.float64))
        torch.testing.assert_close(buffer.pop(), torch.zeros(2, dtype=torch.float64))

    def test_values_for_same_step_accumulate(self):
        buffer = AccumulatingDelayBuffer(max_delay=5, size=2)
        buffer.add_value(2, 0, 1.0)
        buffer.add_value(2, 0, 3.0)
        buffer.add_value(2, 1, -1.0)

        buffer.pop()
        buffer.pop()
        torch.testing.assert_close(buffer.pop(), torch.tensor([4.0, -1.0], dtype=torch.float64))

    def test_delay_delivers_after_exact_number_of_pops(self):
        buffer = AccumulatingDelayBuffer(max_delay=3, size=1)
        buffer.add_value(3, 0, 7.0)

        delivered = [buffer.pop().item() for _ in range(4)]
        assert delivered == [0.0, 0.0, 0.0, 7.0]

    def test_wrap_around(self):
        buffer = AccumulatingDelayBuffer(max_delay=2, size=1)
        for step in range(10):
            buffer.add_value(2, 0, float(step))
            value = buffer.pop().item()
            assert value == (float(step - 2) if step >= 2 else 0.0)

    def test_pop_returns_copy(self):
        buffer = AccumulatingDelayBuffer(max_delay=2, size=1)
        buffer.add_value(0, 0, 1.0)
        values = buffer.pop()

        buffer.add_value(2, 0, 5.0)
        assert values.item() == 1.0

    def test_read_peeks_without_consuming(self):
        buffer = AccumulatingDelayBuffer(max_delay=4, size=1)
        buffer.add_value(1, 0, 2.0)

        assert buffer.read(1).item() == 2.0
        assert buffer.read(0).item() == 0.0
        buffer.pop()
        assert buffer.pop().item() == 2.0

    @pytest.mark.parametrize("delay", [-1, 4])
    def test_delay_out_of_range(self, delay):
        buffer = AccumulatingDelayBuffer(max_delay=3, size=1)
        with pytest.raises(ValueError, match="out of range"):
            buffer.add_value(delay, 0, 1.0)

    def test_column_out_of_range(self):
        buffer = AccumulatingDelayBuffer(max_delay=3, size=2)
        with pytest.raises(ValueError, match="Column"):
            buffer.add_value(0, 2, 1.0)

    def test_resize_keeps_pending_values(self):
        buffer = AccumulatingDelayBuffer(max_delay=3, size=2)
        buffer.add_value(1, 0, 1.0)
        buffer.add_value(1, 1, 2.0)

        buffer.resize(3)
        assert buffer.size == 3
        buffer.pop()
        torch.testing.assert_close(buffer.pop(), torch.tensor([1.0, 2.0, 0.0], dtype=torch.float64))

        buffer.add_value(0, 2, 4.0)
        buffer.resize(1)
        torch.testing.assert_close(buffer.pop(), torch.zeros(1, dtype=torch.float64))

    def test_reset(self):
        buffer = AccumulatingDelayBuffer(max_delay=3, size=1)
        buffer.add_value(2, 0, 1.0)
        buffer.pop()
        buffer.reset()

        assert buffer.ptr == 0
        assert torch.all(buffer.buffer == 0)

    def test_invalid_construction(self):
        with pytest.raises(ValueError):
            AccumulatingDelayBuffer(max_delay=-1, size=1)
        with pytest.raises(ValueError):
            AccumulatingDelayBuffer(max_delay=1, size=-1)
