"""Симулятор рабочего цикла пресса.

Цикл — фиксированная последовательность фаз (FastDown -> Working -> Holding
-> FastUp), каждая с постоянным кинематическим профилем. Внутри фазы
давление постоянно, время шагает с фиксированным dt.

Время считается от целочисленного счётчика шагов (t = k*dt), поэтому
накопления ошибки нет и повторный прогон даёт побайтно тот же ряд.
После FastUp добавляется терминальная точка в момент окончания цикла.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List
import logging

import numpy as np
import pandas as pd

from hydropress.config.models import CycleConfig, PhaseProfile
from hydropress.core.types import CalculationStep, DataPoint, InputModel
from hydropress.physics.formulas import (
    actuator_power_kw,
    flow_lpm,
    force_from_ton_n,
    hydraulic_power_kw,
    piston_area_m2,
    pressure_bar,
    pump_input_kw,
    rod_area_m2,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationResult:
    data: List[DataPoint]
    steps: List[CalculationStep]
    duration_s: float

    def to_frame(self) -> pd.DataFrame:
        """Ряд в виде DataFrame (одна строка на точку, колонки = поля DataPoint)."""

        columns = [
            "time_s",
            "stroke_mm",
            "flow_lpm",
            "pressure_bar",
            "hyd_power_kw",
            "pump_power_kw",
            "actuator_power_kw",
            "phase",
        ]
        return pd.DataFrame([p.as_dict() for p in self.data], columns=columns)


class CycleSimulator:
    def __init__(self, inp: InputModel, cfg: CycleConfig | None = None) -> None:
        self.input = inp
        self.cfg = cfg or CycleConfig()
        self._steps: List[CalculationStep] = []

        self.piston_area = piston_area_m2(inp.bore_cm)
        self._steps.append(
            CalculationStep(
                formula="Piston Area = π × (Bore²) / 4",
                calculation=f"π × ({inp.bore_cm:.2f} cm)² / 4",
                result=f"{self.piston_area:.6f} m² ({self.piston_area * 1e4:.2f} cm²)",
            )
        )

        self.rod_area = rod_area_m2(inp.bore_cm, inp.rod_cm)
        self._steps.append(
            CalculationStep(
                formula="Rod Area = π × (Bore² - Rod²) / 4",
                calculation=f"π × ({inp.bore_cm:.2f}² - {inp.rod_cm:.2f}²) cm² / 4",
                result=f"{self.rod_area:.6f} m² ({self.rod_area * 1e4:.2f} cm²)",
            )
        )

    def _load_ton(self, prof: PhaseProfile) -> float:
        if prof.load == "dead":
            return float(self.input.dead_load_ton)
        if prof.load == "holding":
            return float(self.input.holding_load_ton)
        raise ValueError(f"Unknown phase load: {prof.load}")

    def _area_m2(self, prof: PhaseProfile) -> float:
        if prof.area == "piston":
            return self.piston_area
        if prof.area == "rod":
            return self.rod_area
        raise ValueError(f"Unknown phase area: {prof.area}")

    def _simulate_phase(self, prof: PhaseProfile, k0: int, stroke0_mm: float, n: int) -> List[DataPoint]:
        dt = self.cfg.dt
        d = self.cfg.decimals

        force_n = force_from_ton_n(self._load_ton(prof))
        area = self._area_m2(prof)
        p_bar = pressure_bar(force_n, area)

        # профиль фазы постоянный -> величины тоже постоянны
        q_lpm = flow_lpm(area, prof.speed_mm_s)
        hyd_kw = hydraulic_power_kw(p_bar, q_lpm)
        pump_kw = pump_input_kw(hyd_kw, self.input.pump_efficiency)
        act_kw = actuator_power_kw(force_n, prof.speed_mm_s)

        k = np.arange(n, dtype=np.float64)
        t = np.round((k0 + k) * dt, d)
        x = np.round(stroke0_mm + prof.speed_mm_s * dt * k, d)

        logger.debug(
            "phase %s: n=%d p=%.2f bar q=%.2f L/min hyd=%.2f kW",
            prof.phase.value, n, p_bar, q_lpm, hyd_kw,
        )

        return [
            DataPoint(
                time_s=float(ti),
                stroke_mm=float(xi),
                flow_lpm=round(q_lpm, d),
                pressure_bar=round(p_bar, d),
                hyd_power_kw=round(hyd_kw, d),
                pump_power_kw=round(pump_kw, d),
                actuator_power_kw=round(act_kw, d),
                phase=prof.phase,
            )
            for ti, xi in zip(t, x)
        ]

    def _phase_step(self, index: int, prof: PhaseProfile) -> CalculationStep:
        return CalculationStep(
            formula=f"Phase {index}: {prof.phase.value}",
            calculation=(
                f"{prof.speed_mm_s:g} mm/s speed, {prof.stroke_mm:g} mm stroke, "
                f"{prof.duration_s:.2f} s duration, {prof.load} load on {prof.area} area"
            ),
            result=prof.description,
        )

    def run(self) -> SimulationResult:
        dt = self.cfg.dt
        d = self.cfg.decimals

        steps = list(self._steps)
        data: List[DataPoint] = []

        k = 0
        stroke_mm = 0.0
        for i, prof in enumerate(self.cfg.phases, start=1):
            steps.append(self._phase_step(i, prof))
            n = int(round(prof.duration_s / dt))
            data.extend(self._simulate_phase(prof, k, stroke_mm, n))
            k += n
            stroke_mm += prof.speed_mm_s * dt * n

        # терминальная точка: цилиндр остановлен в конце последней фазы
        if self.cfg.phases:
            last = self.cfg.phases[-1]
            data.append(
                DataPoint(
                    time_s=round(k * dt, d),
                    stroke_mm=round(stroke_mm, d),
                    flow_lpm=0.0,
                    pressure_bar=data[-1].pressure_bar if data else 0.0,
                    hyd_power_kw=0.0,
                    pump_power_kw=0.0,
                    actuator_power_kw=0.0,
                    phase=last.phase,
                )
            )

        logger.info("simulated %d points over %.2f s", len(data), k * dt)
        return SimulationResult(data=data, steps=steps, duration_s=round(k * dt, d))


def run_simulation(inp: InputModel, cfg: CycleConfig | None = None) -> SimulationResult:
    return CycleSimulator(inp, cfg).run()
