"""Формулы гидравлики пресса.

Чистые функции без состояния. Диаметры задаются в см и внутри
переводятся в метры; результат всегда в единицах из имени функции.

Единицы:
- Площадь: м²
- Сила: Н
- Давление: бар
- Расход: л/мин
- Мощность: кВт
"""

from __future__ import annotations

import math

from hydropress.core.units import BAR, CC_PER_LITRE, CM, G, KW, LPM_BAR_PER_KW, LITRE, MM, SECONDS_PER_MINUTE, TONNE
from hydropress.core.validation import ensure_positive, ensure_rod_smaller_than_bore


def piston_area_m2(bore_cm: float) -> float:
    bore_m = float(bore_cm) * CM
    return math.pi * bore_m**2 / 4.0


def rod_area_m2(bore_cm: float, rod_cm: float) -> float:
    """Кольцевая (штоковая) площадь: π·(D² − d²)/4."""

    ensure_rod_smaller_than_bore(bore_cm, rod_cm)
    bore_m = float(bore_cm) * CM
    rod_m = float(rod_cm) * CM
    return math.pi * (bore_m**2 - rod_m**2) / 4.0


def force_from_ton_n(ton: float) -> float:
    return float(ton) * TONNE * G


def pressure_bar(force_n: float, area_m2: float) -> float:
    ensure_positive(area_m2, "area_m2")
    return float(force_n) / float(area_m2) / BAR


def flow_lpm(area_m2: float, speed_mm_s: float) -> float:
    q_m3_s = float(area_m2) * float(speed_mm_s) * MM
    return q_m3_s * SECONDS_PER_MINUTE / LITRE


def hydraulic_power_kw(p_bar: float, q_lpm: float) -> float:
    return float(p_bar) * float(q_lpm) / LPM_BAR_PER_KW


def pump_input_kw(hyd_kw: float, pump_eff: float) -> float:
    ensure_positive(pump_eff, "pump_eff")
    return float(hyd_kw) / float(pump_eff)


def actuator_power_kw(force_n: float, speed_mm_s: float) -> float:
    # механическая мощность на штоке; в покое 0
    if speed_mm_s <= 0.0:
        return 0.0
    return float(force_n) * float(speed_mm_s) * MM / KW


def pump_displacement_cc(q_lpm: float, rpm: float) -> float:
    ensure_positive(rpm, "rpm")
    return float(q_lpm) * CC_PER_LITRE / float(rpm)


def relief_setting_bar(required_bar: float, loss_bar: float, margin_pct: float) -> float:
    return float(required_bar) + float(loss_bar) + float(required_bar) * float(margin_pct) / 100.0
