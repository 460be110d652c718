"""Модель производительности пресса.

predict(input) всегда возвращает результат:
- каждая метрика считается своим блоком коэффициентов;
- если метрику посчитать нельзя (нет блока, NaN, неизвестный признак),
  подставляется грубая физическая оценка, а результат помечается
  source="heuristic", confidence="low";
- efficiency зажимается в [0, 1], давление и время цикла в >= 0.

Уверенность — взвешенный R² трёх подмоделей, пороги в ConfidenceConfig.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional
import logging
import math

from hydropress.advisor.cache import CoefficientCache
from hydropress.advisor.coefficients import METRICS, TermContribution
from hydropress.config.models import ConfidenceConfig
from hydropress.core.types import InputModel

logger = logging.getLogger(__name__)

_STATUS_RANK = {"Normal": 0, "Warning": 1, "Critical": 2}

# метки классификатора стенда -> статус
_HEALTH_LABELS = {
    "normal": "Normal",
    "ok": "Normal",
    "warning": "Warning",
    "fault": "Critical",
    "critical": "Critical",
}


@dataclass(frozen=True)
class PredictionResult:
    max_pressure_bar: float
    efficiency: float
    cycle_time_s: float
    confidence: str                 # low | medium | high
    source: str                     # remote | artifact | fallback | heuristic
    status: str = "Normal"          # Normal | Warning | Critical
    r_squared: Optional[float] = None
    calculations: List[TermContribution] = field(default_factory=list)
    # уверенность по каждой метрике, из того же снапшота, что и значения
    metric_confidence: Dict[str, str] = field(default_factory=dict)

    def metric(self, name: str) -> float:
        if name == "pressure":
            return self.max_pressure_bar
        if name == "efficiency":
            return self.efficiency
        if name == "cycleTime":
            return self.cycle_time_s
        raise KeyError(f"Unknown metric: {name}")


def heuristic_metric(metric: str, inp: InputModel) -> float:
    """Дешёвые физические оценки на случай, когда регрессия недоступна."""

    if metric == "pressure":
        return inp.system_loss_bar + inp.dead_load_ton * 10.0
    if metric == "efficiency":
        return inp.pump_efficiency
    if metric == "cycleTime":
        return (inp.holding_load_ton + inp.dead_load_ton) / (inp.motor_rpm / 60.0)
    raise KeyError(f"Unknown metric: {metric}")


def _clamp(metric: str, value: float) -> float:
    if metric == "efficiency":
        return min(1.0, max(0.0, value))
    return max(0.0, value)


class PerformanceModel:
    def __init__(self, cache: CoefficientCache | None = None, cfg: ConfidenceConfig | None = None) -> None:
        self.cache = cache or CoefficientCache()
        self.cfg = cfg or ConfidenceConfig()

    def weighted_r_squared(self, r2: Dict[str, Optional[float]]) -> Optional[float]:
        num = 0.0
        den = 0.0
        for metric, value in r2.items():
            if value is None:
                continue
            w = float(self.cfg.weights.get(metric, 1.0))
            num += w * float(value)
            den += w
        if den <= 0.0:
            return None
        return num / den

    def metric_label(self, r2: Optional[float]) -> str:
        return "medium" if r2 is None else self.cfg.label(r2)

    def _status(self, efficiency: float, classified: Optional[str]) -> str:
        by_rule = "Normal"
        if efficiency < self.cfg.critical_efficiency:
            by_rule = "Critical"
        elif efficiency < self.cfg.warning_efficiency:
            by_rule = "Warning"

        by_model = _HEALTH_LABELS.get((classified or "").strip().lower(), "Normal")
        return max(by_rule, by_model, key=_STATUS_RANK.__getitem__)

    def predict(self, inp: InputModel) -> PredictionResult:
        snap = self.cache.get()
        coeffs = snap.coefficients

        values: Dict[str, float] = {}
        calculations: List[TermContribution] = []
        heuristic = []

        for metric in METRICS:
            value, parts = coeffs.evaluate(metric, inp)
            if value is None or not math.isfinite(value):
                value = heuristic_metric(metric, inp)
                heuristic.append(metric)
                parts = [TermContribution(metric, "heuristic", 1.0, value, value)]
            values[metric] = _clamp(metric, float(value))
            calculations.extend(parts)

        if heuristic:
            logger.warning("heuristic estimate used for %s (source=%s)", ", ".join(heuristic), snap.source)
            source = "heuristic"
            confidence = "low"
            r2 = None
            per_metric = {m: "low" for m in METRICS}
        else:
            source = snap.source
            by_metric = {m: coeffs.r_squared_for(m) for m in METRICS}
            r2 = self.weighted_r_squared(by_metric)
            # у артефакта R² может не быть вовсе
            confidence = self.metric_label(r2)
            per_metric = {m: self.metric_label(v) for m, v in by_metric.items()}

        status = self._status(values["efficiency"], coeffs.classify_health(inp))

        return PredictionResult(
            max_pressure_bar=values["pressure"],
            efficiency=values["efficiency"],
            cycle_time_s=values["cycleTime"],
            confidence=confidence,
            source=source,
            status=status,
            r_squared=r2,
            calculations=calculations,
            metric_confidence=per_metric,
        )
