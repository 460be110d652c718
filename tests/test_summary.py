import pytest

from hydropress.config.models import CycleConfig
from hydropress.simulator import SimulationResult, run_simulation
from hydropress.summary import summarize_cycle


@pytest.fixture()
def summary(press_input):
    return summarize_cycle(press_input, run_simulation(press_input))


def test_areas(summary):
    assert summary.piston_area_cm2 == pytest.approx(33.18)
    assert summary.rod_area_cm2 == pytest.approx(26.11)


def test_pump_sizing(summary):
    assert summary.required_pressure_bar == pytest.approx(59.13)
    assert summary.pump_displacement_cc_rev == pytest.approx(26.55)
    # 59.13 + 5 бар потерь + 10 % запаса
    assert summary.relief_setting_bar == pytest.approx(70.04)


def test_series_maxima(summary):
    assert summary.max_flow_lpm == pytest.approx(39.82)
    assert summary.max_pressure_bar == pytest.approx(236.51)
    assert summary.max_hyd_power_kw == pytest.approx(3.92)
    assert summary.cycle_time_s == pytest.approx(9.25)
    assert summary.system_efficiency_pct == pytest.approx(90.0)


def test_relief_margin_from_config(press_input):
    result = run_simulation(press_input)
    s = summarize_cycle(press_input, result, CycleConfig(relief_margin_pct=0.0))
    assert s.relief_setting_bar == pytest.approx(64.13)


def test_empty_series(press_input):
    s = summarize_cycle(press_input, SimulationResult(data=[], steps=[], duration_s=0.0))
    assert s.max_flow_lpm == 0.0
    assert s.cycle_time_s == 0.0
    assert s.as_dict()["required_pressure_bar"] == pytest.approx(59.13)


def test_cycle_without_phases(press_input):
    cfg = CycleConfig(phases=())
    summary = summarize_cycle(press_input, run_simulation(press_input, cfg), cfg)
    assert summary.pump_displacement_cc_rev == 0.0
    assert summary.max_flow_lpm == 0.0
    assert summary.cycle_time_s == 0.0
    # давление по нагрузке от фаз не зависит
    assert summary.required_pressure_bar == pytest.approx(59.13)
