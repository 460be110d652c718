from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Literal, Optional, Tuple

from hydropress.core.types import Phase


LoadKind = Literal["dead", "holding"]
AreaKind = Literal["piston", "rod"]


@dataclass(frozen=True)
class PhaseProfile:
    phase: Phase
    speed_mm_s: float
    stroke_mm: float
    duration_s: float
    load: LoadKind       # какая нагрузка определяет усилие фазы
    area: AreaKind       # по какой площади считаем давление и расход
    description: str = ""


DEFAULT_PHASES: Tuple[PhaseProfile, ...] = (
    PhaseProfile(Phase.FAST_DOWN, 200.0, 200.0, 1.00, "dead", "piston", "High flow, low pressure"),
    PhaseProfile(Phase.WORKING, 10.0, 50.0, 5.00, "holding", "piston", "Low flow, high pressure"),
    PhaseProfile(Phase.HOLDING, 0.0, 0.0, 2.00, "holding", "piston", "No flow, maintain pressure"),
    # обратный ход: та же нагрузка холостого хода, но по кольцевой площади
    PhaseProfile(Phase.FAST_UP, 200.0, 250.0, 1.25, "dead", "rod", "High flow, reduced area"),
)


@dataclass(frozen=True)
class CycleConfig:
    dt: float = 0.01
    phases: Tuple[PhaseProfile, ...] = DEFAULT_PHASES
    decimals: int = 2
    relief_margin_pct: float = 10.0

    @property
    def total_duration_s(self) -> float:
        return float(sum(p.duration_s for p in self.phases))


@dataclass(frozen=True)
class ModelSourceConfig:
    # удалённый источник коэффициентов (None -> не ходим в сеть)
    url: Optional[str] = None
    timeout_s: float = 6.0
    attempts: int = 3
    backoff_s: float = 0.5

    # локальный sklearn-style артефакт (None -> не используем)
    artifact_path: Optional[str] = None

    # пороги качества удалённой модели
    min_r_squared: float = 0.7
    min_training_points: int = 1000


@dataclass(frozen=True)
class ConfidenceConfig:
    high: float = 0.92
    medium: float = 0.85
    weights: Dict[str, float] = field(default_factory=lambda: {
        "pressure": 0.4,
        "efficiency": 0.3,
        "cycleTime": 0.3,
    })

    # правило статуса по КПД (доля)
    critical_efficiency: float = 0.2
    warning_efficiency: float = 0.5

    def label(self, r_squared: float) -> str:
        if r_squared >= self.high:
            return "high"
        if r_squared >= self.medium:
            return "medium"
        return "low"


@dataclass(frozen=True)
class ParameterBounds:
    physical: Tuple[float, float]
    recommended: Tuple[float, float]
    step: float


@dataclass(frozen=True)
class AdvisorConfig:
    max_suggestions: int = 4
    epsilon: float = 1e-6
    # минимальный зазор шток/поршень при подборе штока (см)
    rod_clearance_cm: float = 0.5
    bounds: Dict[str, ParameterBounds] = field(default_factory=lambda: {
        "bore_cm": ParameterBounds(physical=(3.0, 12.0), recommended=(3.0, 8.5), step=0.1),
        # верхние границы штока зависят от текущего поршня, см. rod_clearance_cm
        "rod_cm": ParameterBounds(physical=(1.0, float("inf")), recommended=(1.0, float("inf")), step=0.1),
        "motor_rpm": ParameterBounds(physical=(500.0, 3500.0), recommended=(1000.0, 3000.0), step=10.0),
        "pump_efficiency": ParameterBounds(physical=(0.5, 0.98), recommended=(0.7, 0.95), step=0.1),
    })

    @property
    def tunable(self) -> Tuple[str, ...]:
        return tuple(self.bounds.keys())


@dataclass(frozen=True)
class PressConfig:
    cycle: CycleConfig = field(default_factory=CycleConfig)
    source: ModelSourceConfig = field(default_factory=ModelSourceConfig)
    confidence: ConfidenceConfig = field(default_factory=ConfidenceConfig)
    advisor: AdvisorConfig = field(default_factory=AdvisorConfig)
