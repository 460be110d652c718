import math

import pytest

from hydropress.core.types import DataPoint, InputModel, Phase
from hydropress.core.validation import (
    InvalidGeometry,
    InvalidInput,
    ensure_finite,
    ensure_in_range,
    ensure_positive,
)


def test_ensure_positive_ok():
    ensure_positive(1.0, "x")


def test_ensure_positive_raises():
    with pytest.raises(ValueError):
        ensure_positive(0.0, "x")


def test_ensure_finite_rejects_nan():
    with pytest.raises(InvalidInput):
        ensure_finite(math.nan, "x")


def test_ensure_in_range_bounds_inclusive():
    ensure_in_range(1.0, 0.0, 1.0, "eff")
    with pytest.raises(InvalidInput):
        ensure_in_range(1.01, 0.0, 1.0, "eff")


class TestInputModel:
    def test_valid(self, press_input):
        assert press_input.bore_cm == 6.5
        assert press_input.value("motorRpm") == 1500.0

    @pytest.mark.parametrize(
        "field, value",
        [
            ("bore_cm", 0.0),
            ("rod_cm", -1.0),
            ("dead_load_ton", 0.0),
            ("holding_load_ton", math.nan),
            ("motor_rpm", 0.0),
            ("pump_efficiency", 0.0),
            ("pump_efficiency", 1.2),
            ("system_loss_bar", -5.0),
        ],
    )
    def test_rejects_invalid_values(self, press_input, field, value):
        with pytest.raises(InvalidInput):
            press_input.with_value(field, value)

    def test_rod_must_be_smaller_than_bore(self, press_input):
        with pytest.raises(InvalidGeometry):
            press_input.with_value("rod_cm", 6.5)

    def test_invalid_geometry_is_value_error(self):
        assert issubclass(InvalidGeometry, ValueError)

    def test_from_mapping_accepts_camel_case(self, press_input):
        inp = InputModel.from_mapping(
            {
                "boreCm": 6.5,
                "rodCm": 3,
                "deadLoadTon": 2,
                "holdingLoadTon": 8,
                "motorRpm": 1500,
                "pumpEfficiency": 0.9,
                "systemLossBar": 5,
            }
        )
        assert inp == press_input

    def test_from_mapping_missing_field(self):
        with pytest.raises(ValueError, match="missing"):
            InputModel.from_mapping({"bore_cm": 6.5})

    def test_with_value_returns_new_instance(self, press_input):
        other = press_input.with_value("boreCm", 7.0)
        assert other.bore_cm == 7.0
        assert press_input.bore_cm == 6.5


def test_data_point_as_dict_serializes_phase():
    p = DataPoint(0.0, 0.0, 1.0, 2.0, 3.0, 4.0, 5.0, Phase.FAST_UP)
    assert p.as_dict()["phase"] == "FastUp"
    assert DataPoint(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0).as_dict()["phase"] is None
