"""Пакет физики (формулы гидравлики пресса)."""

from __future__ import annotations

from .formulas import (
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

__all__ = [
    "piston_area_m2",
    "rod_area_m2",
    "force_from_ton_n",
    "pressure_bar",
    "flow_lpm",
    "hydraulic_power_kw",
    "pump_input_kw",
    "actuator_power_kw",
    "pump_displacement_cc",
    "relief_setting_bar",
]
