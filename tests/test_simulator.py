import numpy as np
import pytest

from hydropress.config.models import CycleConfig, PhaseProfile
from hydropress.core.types import Phase
from hydropress.core.validation import InvalidGeometry
from hydropress.simulator import CycleSimulator, run_simulation


@pytest.fixture()
def result(press_input):
    return run_simulation(press_input)


class TestSeries:
    def test_point_count_and_end_time(self, result):
        # 100 + 500 + 200 + 125 шагов + терминальная точка
        assert len(result.data) == 926
        assert result.data[0].time_s == 0.0
        assert result.data[-1].time_s == pytest.approx(9.25)
        assert result.duration_s == pytest.approx(9.25)

    def test_time_is_non_decreasing(self, result):
        t = np.array([p.time_s for p in result.data])
        assert np.all(np.diff(t) >= 0.0)

    def test_phase_order(self, result):
        seen = []
        for p in result.data:
            if not seen or seen[-1] != p.phase:
                seen.append(p.phase)
        assert seen == [Phase.FAST_DOWN, Phase.WORKING, Phase.HOLDING, Phase.FAST_UP]

    def test_phase_sample_counts(self, result):
        counts = {}
        for p in result.data:
            counts[p.phase] = counts.get(p.phase, 0) + 1
        assert counts == {
            Phase.FAST_DOWN: 100,
            Phase.WORKING: 500,
            Phase.HOLDING: 200,
            Phase.FAST_UP: 126,
        }

    def test_final_stroke(self, result):
        assert result.data[-1].stroke_mm == pytest.approx(500.0)

    def test_deterministic(self, press_input, result):
        again = run_simulation(press_input)
        assert again.data == result.data
        assert again.steps == result.steps


class TestPhysics:
    def test_fast_down_values(self, result):
        p = result.data[0]
        assert p.pressure_bar == pytest.approx(59.13)
        assert p.flow_lpm == pytest.approx(39.82)
        assert p.hyd_power_kw == pytest.approx(3.92)
        assert p.pump_power_kw == pytest.approx(4.36)

    def test_fast_up_uses_rod_area(self, result):
        up = next(p for p in result.data if p.phase == Phase.FAST_UP)
        assert up.pressure_bar > result.data[0].pressure_bar
        assert up.pressure_bar == pytest.approx(75.13, abs=0.01)
        assert up.flow_lpm < result.data[0].flow_lpm

    def test_holding_has_no_flow(self, result):
        holding = [p for p in result.data if p.phase == Phase.HOLDING]
        assert all(p.flow_lpm == 0.0 for p in holding)
        assert all(p.actuator_power_kw == 0.0 for p in holding)
        assert holding[0].pressure_bar == pytest.approx(236.51, abs=0.01)

    def test_terminal_point_is_at_rest(self, result):
        last = result.data[-1]
        assert last.phase == Phase.FAST_UP
        assert last.flow_lpm == 0.0
        assert last.hyd_power_kw == 0.0
        assert last.pressure_bar == result.data[-2].pressure_bar

    def test_invalid_geometry_fails_before_simulation(self, press_input):
        with pytest.raises(InvalidGeometry):
            CycleSimulator(press_input.with_value("rod_cm", 6.5))


class TestCalculationSteps:
    def test_steps(self, result):
        assert len(result.steps) == 6
        assert result.steps[0].formula.startswith("Piston Area")
        assert result.steps[1].formula.startswith("Rod Area")
        assert [s.formula for s in result.steps[2:]] == [
            "Phase 1: FastDown",
            "Phase 2: Working",
            "Phase 3: Holding",
            "Phase 4: FastUp",
        ]
        assert "cm²" in result.steps[0].result


def test_custom_phase_table(press_input):
    cfg = CycleConfig(
        phases=(PhaseProfile(Phase.WORKING, 10.0, 10.0, 1.0, "holding", "piston"),),
    )
    result = run_simulation(press_input, cfg)
    assert len(result.data) == 101
    assert result.duration_s == pytest.approx(1.0)
    assert cfg.total_duration_s == pytest.approx(1.0)


def test_to_frame(result):
    frame = result.to_frame()
    assert len(frame) == 926
    assert list(frame.columns)[:2] == ["time_s", "stroke_mm"]
    assert frame["phase"].iloc[0] == "FastDown"
    assert frame["pressure_bar"].max() == pytest.approx(236.51, abs=0.01)
