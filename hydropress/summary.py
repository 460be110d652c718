"""Сводка по циклу: расчётные параметры гидросистемы + экстремумы ряда."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict

from hydropress.config.models import CycleConfig
from hydropress.core.types import InputModel, Phase
from hydropress.physics.formulas import (
    flow_lpm,
    force_from_ton_n,
    piston_area_m2,
    pressure_bar,
    pump_displacement_cc,
    relief_setting_bar,
    rod_area_m2,
)
from hydropress.simulator import SimulationResult


@dataclass(frozen=True)
class CycleSummary:
    piston_area_cm2: float
    rod_area_cm2: float
    required_pressure_bar: float
    pump_displacement_cc_rev: float
    relief_setting_bar: float
    max_flow_lpm: float
    max_pressure_bar: float
    max_hyd_power_kw: float
    cycle_time_s: float
    system_efficiency_pct: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def summarize_cycle(inp: InputModel, result: SimulationResult, cfg: CycleConfig | None = None) -> CycleSummary:
    """Сводка для отчёта.

    Требуемое давление и подача насоса считаются по фазе быстрого
    опускания (нагрузка холостого хода на поршневую площадь), как в
    паспортном расчёте гидростанции.
    """

    cfg = cfg or CycleConfig()

    a_piston = piston_area_m2(inp.bore_cm)
    a_rod = rod_area_m2(inp.bore_cm, inp.rod_cm)
    p_required = pressure_bar(force_from_ton_n(inp.dead_load_ton), a_piston)

    fast_down = next((p for p in cfg.phases if p.phase == Phase.FAST_DOWN), None)
    if fast_down is None and cfg.phases:
        fast_down = cfg.phases[0]
    # без фаз подачи нет: рабочий объём насоса 0
    q_fast = flow_lpm(a_piston, fast_down.speed_mm_s) if fast_down is not None else 0.0

    if result.data:
        frame = result.to_frame()
        max_flow = float(frame["flow_lpm"].max())
        max_pressure = float(frame["pressure_bar"].max())
        max_power = float(frame["hyd_power_kw"].max())
        cycle_time = float(frame["time_s"].max())
    else:
        max_flow = max_pressure = max_power = cycle_time = 0.0

    return CycleSummary(
        piston_area_cm2=round(a_piston * 1e4, 2),
        rod_area_cm2=round(a_rod * 1e4, 2),
        required_pressure_bar=round(p_required, 2),
        pump_displacement_cc_rev=round(pump_displacement_cc(q_fast, inp.motor_rpm), 2),
        relief_setting_bar=round(relief_setting_bar(p_required, inp.system_loss_bar, cfg.relief_margin_pct), 2),
        max_flow_lpm=max_flow,
        max_pressure_bar=max_pressure,
        max_hyd_power_kw=max_power,
        cycle_time_s=cycle_time,
        system_efficiency_pct=round(inp.pump_efficiency * 100.0, 1),
    )
