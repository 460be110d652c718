"""Советник по настройке пресса (goal seeking через чувствительности).

Для каждой запрошенной цели (время цикла, давление, КПД в процентах):
    target = current·(1 + pct/100),  diff = target − current.
Для каждого настраиваемого параметра x:
    S  = (f(x + h) − f(x)) / h      (h = 10 для оборотов, 0.1 для остального;
                                     если x + h недопустим, разность назад)
    Δx = diff / S                   (|S| < ε -> параметр пропускаем)
    x' = clamp(x + Δx, физические границы)
out_of_range: значение зажато или вне рекомендуемого диапазона.
Если x уже на границе, предложение остаётся (изменение 0, out_of_range);
если x за границей и зажим развернул бы шаг против цели, параметр пропускаем.

Итог ранжируется по уверенности (high > medium > low, при равенстве
сохраняется порядок появления) и обрезается до max_suggestions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Tuple
import logging
import math

from hydropress.advisor.model import PerformanceModel, PredictionResult
from hydropress.config.models import AdvisorConfig
from hydropress.core.types import CalculationStep, InputModel

logger = logging.getLogger(__name__)

_CONFIDENCE_RANK = {"high": 2, "medium": 1, "low": 0}
_DOWNGRADE = {"high": "medium", "medium": "low", "low": "low"}

_METRIC_LABELS = {
    "cycleTime": ("Cycle time", "s"),
    "pressure": ("Max pressure", "bar"),
    "efficiency": ("Efficiency", ""),
}

_PARAMETER_LABELS = {
    "bore_cm": ("Bore diameter", "cm"),
    "rod_cm": ("Rod diameter", "cm"),
    "motor_rpm": ("Motor speed", "rpm"),
    "pump_efficiency": ("Pump efficiency", ""),
}


def _fmt(value: float, unit: str, spec: str = ".2f") -> str:
    return f"{value:{spec}} {unit}".rstrip()


@dataclass(frozen=True)
class Goal:
    target_cycle_time_pct: Optional[float] = None
    target_max_pressure_pct: Optional[float] = None
    target_efficiency_pct: Optional[float] = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Goal":
        def pick(*keys: str) -> Optional[float]:
            for k in keys:
                if values.get(k) is not None:
                    return float(values[k])
            return None

        return cls(
            target_cycle_time_pct=pick("target_cycle_time_pct", "targetCycleTimePct"),
            target_max_pressure_pct=pick("target_max_pressure_pct", "targetMaxPressurePct"),
            target_efficiency_pct=pick("target_efficiency_pct", "targetEfficiencyPct"),
        )

    def requested(self) -> List[Tuple[str, float]]:
        """(metric, pct) для заданных ненулевых целей."""

        out = []
        for metric, pct in (
            ("cycleTime", self.target_cycle_time_pct),
            ("pressure", self.target_max_pressure_pct),
            ("efficiency", self.target_efficiency_pct),
        ):
            if pct is None or not math.isfinite(pct) or pct == 0.0:
                continue
            out.append((metric, float(pct)))
        return out


@dataclass(frozen=True)
class Suggestion:
    parameter: str
    current_value: float
    suggested_value: float
    change: float
    impact: str
    out_of_range: bool
    confidence: str
    reasoning: str
    metric: str = ""
    calculation_steps: List[CalculationStep] = field(default_factory=list)


@dataclass(frozen=True)
class _Derivative:
    sensitivity: float
    step: float             # со знаком: отрицательный -> разность назад
    perturbed_value: float


class SensitivityAdvisor:
    def __init__(self, model: PerformanceModel, cfg: AdvisorConfig | None = None) -> None:
        self.model = model
        self.cfg = cfg or AdvisorConfig()

    # ---------- границы ----------

    def physical_bounds(self, inp: InputModel, parameter: str) -> Tuple[float, float]:
        lo, hi = self.cfg.bounds[parameter].physical
        if parameter == "rod_cm":
            hi = inp.bore_cm - self.cfg.rod_clearance_cm
        return lo, hi

    def is_out_of_range(self, inp: InputModel, parameter: str, value: float) -> bool:
        lo, hi = self.cfg.bounds[parameter].recommended
        if not (lo <= value <= hi):
            return True
        if parameter == "rod_cm":
            return value >= inp.bore_cm
        if parameter == "bore_cm":
            return value <= inp.rod_cm
        return False

    # ---------- чувствительность ----------

    def derivative(self, inp: InputModel, parameter: str, metric: str, base_value: float) -> Optional[_Derivative]:
        h = self.cfg.bounds[parameter].step
        x = inp.value(parameter)
        for step in (h, -h):
            try:
                perturbed = inp.with_value(parameter, x + step)
            except ValueError:
                continue
            value = self.model.predict(perturbed).metric(metric)
            return _Derivative((value - base_value) / step, step, value)
        return None

    # ---------- синтез ----------

    def _predict_at(self, inp: InputModel, parameter: str, value: float, metric: str) -> Optional[float]:
        try:
            candidate = inp.with_value(parameter, value)
        except ValueError:
            return None
        return self.model.predict(candidate).metric(metric)

    def _suggest_one(
        self,
        inp: InputModel,
        current: PredictionResult,
        metric: str,
        pct: float,
        parameter: str,
    ) -> Optional[Suggestion]:
        base = current.metric(metric)
        target = base * (1.0 + pct / 100.0)
        diff = target - base

        der = self.derivative(inp, parameter, metric, base)
        if der is None or abs(der.sensitivity) < self.cfg.epsilon:
            logger.debug("skip %s for %s: negligible sensitivity", parameter, metric)
            return None

        x = inp.value(parameter)
        lo, hi = self.physical_bounds(inp, parameter)
        if hi < lo:
            logger.debug("skip %s: no feasible range [%s, %s]", parameter, lo, hi)
            return None

        raw_change = diff / der.sensitivity
        if abs(raw_change) < 1e-9:
            return None
        raw = x + raw_change
        suggested = round(min(hi, max(lo, raw)), 4)
        clamped = suggested != round(raw, 4)
        change = round(suggested - x, 4)
        if change * raw_change < 0:
            # x уже за границей: зажим развернул бы шаг против цели
            logger.debug(
                "skip %s for %s: current %s outside [%s, %s], clamping reverses the move",
                parameter, metric, x, lo, hi,
            )
            return None
        if abs(change) < 1e-9 and not clamped:
            return None
        at_limit = clamped and abs(change) < 1e-9

        out_of_range = clamped or self.is_out_of_range(inp, parameter, suggested)

        confidence = current.metric_confidence.get(metric, "low")
        if out_of_range:
            confidence = _DOWNGRADE[confidence]

        m_label, m_unit = _METRIC_LABELS[metric]
        p_label, p_unit = _PARAMETER_LABELS[parameter]

        expected = self._predict_at(inp, parameter, suggested, metric)
        if expected is None:
            impact = f"{m_label}: not evaluable, {p_label.lower()} {suggested:g} breaks geometry"
        else:
            delta_pct = (expected - base) / base * 100.0 if base else 0.0
            impact = (
                f"{m_label} {_fmt(base, '')} → {_fmt(expected, m_unit)} "
                f"({delta_pct:+.1f}%, target {pct:+.1f}%)"
            )

        reasoning = (
            f"{m_label} changes by {_fmt(der.sensitivity, m_unit, '.4g')} per {p_unit or 'unit'} of "
            f"{p_label.lower()}; reaching {_fmt(target, m_unit)} needs {_fmt(raw_change, p_unit, '+.4g')}"
        )
        if at_limit:
            reasoning += f"; already at physical limit [{lo:g}, {hi:g}], no further change possible"
        elif clamped:
            reasoning += f"; clamped to physical limit [{lo:g}, {hi:g}]"
        elif out_of_range:
            reasoning += "; outside recommended operating range"

        steps = [
            CalculationStep(
                formula="target = current × (1 + pct / 100)",
                calculation=f"{base:.4f} × (1 + {pct:g} / 100)",
                result=f"{target:.4f}",
            ),
            CalculationStep(
                formula="S = (f(x + h) − f(x)) / h",
                calculation=f"({der.perturbed_value:.4f} − {base:.4f}) / {der.step:g}",
                result=f"{der.sensitivity:.6g}",
            ),
            CalculationStep(
                formula="Δx = (target − current) / S",
                calculation=f"{diff:.4f} / {der.sensitivity:.6g}",
                result=f"{raw_change:+.4f}",
            ),
            CalculationStep(
                formula="x' = clamp(x + Δx, min, max)",
                calculation=f"clamp({x:.4f} + {raw_change:+.4f}, {lo:g}, {hi:g})",
                result=f"{suggested:.4f}",
            ),
        ]

        return Suggestion(
            parameter=parameter,
            current_value=x,
            suggested_value=suggested,
            change=change,
            impact=impact,
            out_of_range=out_of_range,
            confidence=confidence,
            reasoning=reasoning,
            metric=metric,
            calculation_steps=steps,
        )

    def suggest(self, inp: InputModel, goal: Goal) -> List[Suggestion]:
        requested = goal.requested()
        if not requested:
            return []

        current = self.model.predict(inp)
        candidates: List[Suggestion] = []
        for metric, pct in requested:
            for parameter in self.cfg.tunable:
                s = self._suggest_one(inp, current, metric, pct, parameter)
                if s is not None:
                    candidates.append(s)

        # sorted() стабилен: при равной уверенности сохраняется порядок появления
        ranked = sorted(candidates, key=lambda s: -_CONFIDENCE_RANK[s.confidence])
        logger.info("advisor: %d candidate(s), returning %d", len(candidates), min(len(ranked), self.cfg.max_suggestions))
        return ranked[: self.cfg.max_suggestions]

    suggest_improvements = suggest
