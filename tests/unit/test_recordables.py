"""Tests for RecordablesMap and DataLogger."""

import pytest

from glifcond.diagnostics.recordables import DataLogger, RecordablesMap
from glifcond.errors import ConfigurationError, UnknownRecordableError


class _Source:
    def __init__(self):
        self.value = 0.0


@pytest.fixture
def source():
    return _Source()


@pytest.fixture
def recordables(source):
    r = RecordablesMap()
    r.insert("V_m", lambda: source.value)
    r.insert("I", lambda: 2 * source.value)
    return r


@pytest.mark.unit
class TestRecordablesMap:

    def test_order_and_lookup(self, recordables, source):
        source.value = 1.5

        assert recordables.get_list() == ["V_m", "I"]
        assert recordables.get("I") == 3.0
        assert "V_m" in recordables
        assert len(recordables) == 2

    def test_insert_appends(self, recordables):
        recordables.insert("g_0", lambda: 0.0)
        assert recordables.get_list()[-1] == "g_0"

    def test_erase(self, recordables):
        recordables.erase("I")
        assert recordables.get_list() == ["V_m"]

    def test_unknown_name(self, recordables):
        with pytest.raises(UnknownRecordableError, match="Available recordables"):
            recordables["g_3"]
        with pytest.raises(UnknownRecordableError):
            recordables.erase("g_3")

    def test_unknown_recordable_is_configuration_error(self, recordables):
        with pytest.raises(ConfigurationError):
            recordables.get("nope")


@pytest.mark.unit
class TestDataLogger:

    def test_samples_every_step(self, recordables, source):
        logger = DataLogger(recordables, ["V_m", "I"])
        for step in range(3):
            source.value = float(step)
            logger.record(step)

        assert logger.times == [0, 1, 2]
        assert logger.data["V_m"] == [0.0, 1.0, 2.0]
        assert logger.data["I"] == [0.0, 2.0, 4.0]

    def test_interval(self, recordables):
        logger = DataLogger(recordables, ["V_m"], interval_steps=3)
        for step in range(7):
            logger.record(step)

        assert logger.times == [0, 3, 6]

    def test_unknown_channel_rejected(self, recordables):
        with pytest.raises(UnknownRecordableError):
            DataLogger(recordables, ["V_m", "threshold"])

    def test_invalid_interval(self, recordables):
        with pytest.raises(ValueError):
            DataLogger(recordables, ["V_m"], interval_steps=0)

    def test_clear(self, recordables):
        logger = DataLogger(recordables, ["V_m"])
        logger.record(0)
        logger.clear()

        assert logger.times == []
        assert logger.data == {"V_m": []}
