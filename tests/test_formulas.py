import math

import pytest

from hydropress.core.validation import InvalidGeometry
from hydropress.physics.formulas import (
    actuator_power_kw,
    flow_lpm,
    force_from_ton_n,
    hydraulic_power_kw,
    piston_area_m2,
    pressure_bar,
    pump_displacement_cc,
    pump_input_kw,
    relief_setting_bar,
    rod_area_m2,
)


class TestAreas:
    def test_piston_area(self):
        assert piston_area_m2(6.5) == pytest.approx(0.0033183, rel=1e-4)

    def test_rod_area_is_annulus(self):
        expected = math.pi * (0.065**2 - 0.03**2) / 4.0
        assert rod_area_m2(6.5, 3.0) == pytest.approx(expected)
        assert rod_area_m2(6.5, 3.0) < piston_area_m2(6.5)

    @pytest.mark.parametrize("rod", [6.5, 7.0])
    def test_rod_not_smaller_than_bore(self, rod):
        with pytest.raises(InvalidGeometry):
            rod_area_m2(6.5, rod)


class TestForcesAndPressure:
    def test_force_from_ton(self):
        assert force_from_ton_n(2.0) == pytest.approx(19620.0)

    def test_pressure_fast_down(self):
        p = pressure_bar(force_from_ton_n(2.0), piston_area_m2(6.5))
        assert p == pytest.approx(59.13, abs=0.01)

    def test_pressure_rejects_zero_area(self):
        with pytest.raises(ValueError):
            pressure_bar(1000.0, 0.0)


class TestFlowAndPower:
    def test_flow(self):
        assert flow_lpm(piston_area_m2(6.5), 200.0) == pytest.approx(39.82, abs=0.01)

    def test_flow_zero_speed(self):
        assert flow_lpm(piston_area_m2(6.5), 0.0) == 0.0

    def test_hydraulic_power(self):
        assert hydraulic_power_kw(59.13, 39.82) == pytest.approx(3.924, abs=1e-3)

    def test_pump_input(self):
        assert pump_input_kw(3.6, 0.9) == pytest.approx(4.0)

    @pytest.mark.parametrize("eff", [0.0, -0.5])
    def test_pump_input_rejects_bad_efficiency(self, eff):
        with pytest.raises(ValueError):
            pump_input_kw(3.6, eff)

    def test_actuator_power(self):
        # 19620 N × 0.2 m/s = 3.924 kW
        assert actuator_power_kw(19620.0, 200.0) == pytest.approx(3.924)
        assert actuator_power_kw(19620.0, 0.0) == 0.0


class TestPumpSizing:
    def test_displacement(self):
        assert pump_displacement_cc(39.82, 1500.0) == pytest.approx(26.547, abs=1e-3)

    def test_displacement_rejects_zero_rpm(self):
        with pytest.raises(ValueError):
            pump_displacement_cc(39.82, 0.0)

    def test_relief_setting(self):
        assert relief_setting_bar(100.0, 5.0, 10.0) == pytest.approx(115.0)
