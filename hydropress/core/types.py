"""hydropress.core.types

Базовые типы данных пресса: входные параметры, фазы цикла, точки
временного ряда и шаги расчёта (audit trail).

Все типы неизменяемые: точка, однажды добавленная в ряд, больше не меняется.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from hydropress.core.validation import (
    ensure_in_range,
    ensure_positive,
    ensure_rod_smaller_than_bore,
)


# camelCase-имена внешних форм/JSON -> поля InputModel
FIELD_ALIASES: Dict[str, str] = {
    "boreCm": "bore_cm",
    "rodCm": "rod_cm",
    "deadLoadTon": "dead_load_ton",
    "holdingLoadTon": "holding_load_ton",
    "motorRpm": "motor_rpm",
    "pumpEfficiency": "pump_efficiency",
    "systemLossBar": "system_loss_bar",
}


def canonical_field(name: str) -> str:
    """`boreCm` -> `bore_cm`; snake_case имена возвращаются как есть."""

    return FIELD_ALIASES.get(name, name)


@dataclass(frozen=True, slots=True)
class InputModel:
    """Параметры пресса на один вызов симуляции/прогноза.

    bore_cm / rod_cm:
        диаметры поршня и штока (см), rod_cm < bore_cm.
    dead_load_ton / holding_load_ton:
        нагрузка холостого хода и рабочее усилие (т).
    motor_rpm:
        обороты приводного двигателя насоса.
    pump_efficiency:
        полный КПД насоса, доля (0, 1].
    system_loss_bar:
        суммарные потери давления в линиях (бар).
    """

    bore_cm: float
    rod_cm: float
    dead_load_ton: float
    holding_load_ton: float
    motor_rpm: float
    pump_efficiency: float
    system_loss_bar: float

    def __post_init__(self) -> None:
        ensure_positive(self.bore_cm, "bore_cm")
        ensure_positive(self.rod_cm, "rod_cm")
        ensure_positive(self.dead_load_ton, "dead_load_ton")
        ensure_positive(self.holding_load_ton, "holding_load_ton")
        ensure_positive(self.motor_rpm, "motor_rpm")
        ensure_positive(self.pump_efficiency, "pump_efficiency")
        ensure_in_range(self.pump_efficiency, 0.0, 1.0, "pump_efficiency")
        ensure_positive(self.system_loss_bar, "system_loss_bar")
        ensure_rod_smaller_than_bore(self.bore_cm, self.rod_cm)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "InputModel":
        """Собрать из словаря с snake_case или camelCase ключами."""

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = canonical_field(key)
            if name in known:
                kwargs[name] = float(value)
        missing = known - set(kwargs)
        if missing:
            raise ValueError(f"InputModel is missing fields: {sorted(missing)}")
        return cls(**kwargs)

    def with_value(self, name: str, value: float) -> "InputModel":
        return replace(self, **{canonical_field(name): float(value)})

    def value(self, name: str) -> float:
        return float(getattr(self, canonical_field(name)))

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


class Phase(str, Enum):
    FAST_DOWN = "FastDown"
    WORKING = "Working"
    HOLDING = "Holding"
    FAST_UP = "FastUp"


@dataclass(frozen=True, slots=True)
class DataPoint:
    time_s: float
    stroke_mm: float
    flow_lpm: float
    pressure_bar: float
    hyd_power_kw: float
    pump_power_kw: float
    actuator_power_kw: float
    phase: Optional[Phase] = None

    def as_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["phase"] = self.phase.value if self.phase is not None else None
        return d


@dataclass(frozen=True, slots=True)
class CalculationStep:
    """Запись audit trail: формула, подстановка, результат (всё строками)."""

    formula: str
    calculation: str
    result: str


@dataclass(frozen=True, slots=True)
class PhaseEnergy:
    phase: str
    energy_kj: float
    duration_s: float
    avg_power_kw: float
