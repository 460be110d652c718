"""Схемы коэффициентов модели производительности.

Две формы внешних данных:

1. RegressionCoefficients: основной (удалённый) источник. Для каждой
   метрики (pressure, efficiency, cycleTime) свободный член + линейные,
   квадратичные и парные члены по полям InputModel, плюс R² и метаданные.

2. ArtifactModel: локальный sklearn-style артефакт: для каждой подмодели
   список признаков, стандартизатор (mean/scale), intercept и coef.
   Регрессия: intercept + Σ coef_i·(x_i − mean_i)/scale_i.
   Классификация (health): argmax по логитам классов.

Внешний JSON никогда не используется «как есть»: он проходит через
pydantic-схему, и только потом из него что-то считается.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Protocol, Tuple, Union
import logging
import math

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, FiniteFloat, field_validator, model_validator

from hydropress.core.types import FIELD_ALIASES, InputModel, canonical_field

logger = logging.getLogger(__name__)

METRICS: Tuple[str, ...] = ("pressure", "efficiency", "cycleTime")

_INPUT_FIELDS = frozenset(FIELD_ALIASES.values())


def _reject_non_numeric(v: Any) -> Any:
    # bool: подкласс int; строки pydantic в lax-режиме молча приводит
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"expected a number, got {type(v).__name__}")
    return v


Number = Annotated[FiniteFloat, BeforeValidator(_reject_non_numeric)]


@dataclass(frozen=True)
class TermContribution:
    metric: str
    term: str
    coefficient: float
    value: float
    contribution: float


class CoefficientModel(Protocol):
    """Общий контракт снапшота коэффициентов (удалённого, артефакта, встроенного)."""

    def evaluate(self, metric: str, inp: InputModel) -> Tuple[Optional[float], List[TermContribution]]: ...

    def r_squared_for(self, metric: str) -> Optional[float]: ...

    def classify_health(self, inp: InputModel) -> Optional[str]: ...


# ---------- Основная форма: именованные члены регрессии ----------

def _canonical_terms(terms: Mapping[str, float]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for key, coef in terms.items():
        name = canonical_field(key.strip())
        if name not in _INPUT_FIELDS:
            raise ValueError(f"unknown feature in regression term: {key}")
        out[name] = coef
    return out


class MetricCoefficients(BaseModel):
    model_config = ConfigDict(extra="ignore")

    intercept: Number
    linear: Dict[str, Number] = Field(default_factory=dict)
    quadratic: Dict[str, Number] = Field(default_factory=dict)
    interactions: Dict[str, Number] = Field(default_factory=dict)

    @field_validator("linear", "quadratic")
    @classmethod
    def _known_features(cls, v: Dict[str, float]) -> Dict[str, float]:
        return _canonical_terms(v)

    @field_validator("interactions")
    @classmethod
    def _known_pairs(cls, v: Dict[str, float]) -> Dict[str, float]:
        out: Dict[str, float] = {}
        for key, coef in v.items():
            parts = [p.strip() for p in key.split("*")]
            if len(parts) != 2:
                raise ValueError(f"interaction term must look like 'a*b', got {key}")
            a, b = (canonical_field(p) for p in parts)
            if a not in _INPUT_FIELDS or b not in _INPUT_FIELDS:
                raise ValueError(f"unknown feature in interaction term: {key}")
            out[f"{a}*{b}"] = coef
        return out

    def evaluate(self, metric: str, inp: InputModel) -> Tuple[float, List[TermContribution]]:
        parts = [TermContribution(metric, "intercept", float(self.intercept), 1.0, float(self.intercept))]
        for name, coef in self.linear.items():
            x = inp.value(name)
            parts.append(TermContribution(metric, name, coef, x, coef * x))
        for name, coef in self.quadratic.items():
            x = inp.value(name)
            parts.append(TermContribution(metric, f"{name}^2", coef, x * x, coef * x * x))
        for key, coef in self.interactions.items():
            a, b = key.split("*")
            x = inp.value(a) * inp.value(b)
            parts.append(TermContribution(metric, key, coef, x, coef * x))
        return float(sum(p.contribution for p in parts)), parts


class RSquared(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pressure: Number
    efficiency: Number
    cycle_time: Number = Field(alias="cycleTime")


class ModelMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    training_data_points: int = Field(alias="trainingDataPoints", ge=0)
    last_updated: Optional[str] = Field(default=None, alias="lastUpdated")
    validation_score: Optional[Number] = Field(default=None, alias="validationScore")
    feature_importance: Dict[str, Number] = Field(default_factory=dict, alias="featureImportance")


class RegressionCoefficients(BaseModel):
    # model_metadata: имя из внешнего контракта, отключаем защиту префикса model_
    model_config = ConfigDict(populate_by_name=True, extra="ignore", protected_namespaces=())

    pressure: MetricCoefficients
    efficiency: MetricCoefficients
    cycle_time: MetricCoefficients = Field(alias="cycleTime")
    r_squared: RSquared = Field(alias="rSquared")
    model_metadata: ModelMetadata = Field(alias="modelMetadata")

    def block(self, metric: str) -> MetricCoefficients:
        # каждая метрика считается строго своим блоком
        if metric == "pressure":
            return self.pressure
        if metric == "efficiency":
            return self.efficiency
        if metric == "cycleTime":
            return self.cycle_time
        raise KeyError(f"Unknown metric: {metric}")

    def evaluate(self, metric: str, inp: InputModel) -> Tuple[Optional[float], List[TermContribution]]:
        return self.block(metric).evaluate(metric, inp)

    def r_squared_for(self, metric: str) -> Optional[float]:
        return {
            "pressure": self.r_squared.pressure,
            "efficiency": self.r_squared.efficiency,
            "cycleTime": self.r_squared.cycle_time,
        }[metric]

    def classify_health(self, inp: InputModel) -> Optional[str]:
        return None


def quality_issues(coeffs: RegressionCoefficients, min_r_squared: float, min_training_points: int) -> List[str]:
    """Пустой список -> модель годится, иначе человекочитаемые причины."""

    issues = []
    for metric in METRICS:
        r2 = coeffs.r_squared_for(metric)
        if r2 is None or r2 < min_r_squared:
            issues.append(f"rSquared[{metric}]={r2} < {min_r_squared}")
    n = coeffs.model_metadata.training_data_points
    if n <= min_training_points:
        issues.append(f"trainingDataPoints={n} <= {min_training_points}")
    return issues


# ---------- Вторичная форма: sklearn-style артефакт ----------

def artifact_features(inp: InputModel) -> Dict[str, float]:
    """Признаки, доступные артефакту.

    Поля InputModel (snake_case и camelCase) + «сенсорные» признаки, на
    которых обучались sklearn-модели стенда.
    """

    feats: Dict[str, float] = dict(inp.as_dict())
    for camel, snake in FIELD_ALIASES.items():
        feats[camel] = feats[snake]

    feats.update(
        {
            "pressureBar": inp.system_loss_bar + inp.dead_load_ton * 10.0,
            "temperatureC": 40.0 + inp.motor_rpm / 1000.0,
            "vibration": 0.5 + inp.holding_load_ton / 100.0,
            "flowLpm": inp.motor_rpm * inp.pump_efficiency / 20.0,
            "systemEfficiency": inp.pump_efficiency * 100.0 - inp.system_loss_bar,
        }
    )
    return feats


class SklearnScaler(BaseModel):
    mean: Dict[str, Number] = Field(default_factory=dict)
    scale: Dict[str, Number] = Field(default_factory=dict)


class SklearnSubModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: Literal["regression", "classification"]
    features: List[str]
    scaler: SklearnScaler = Field(default_factory=SklearnScaler)
    intercept: Union[Number, List[Number]]
    coef: Union[List[Number], List[List[Number]]]
    classes: Optional[List[str]] = None
    r_squared: Optional[Number] = Field(default=None, alias="rSquared")

    @model_validator(mode="after")
    def _shapes(self) -> "SklearnSubModel":
        n = len(self.features)
        if self.type == "regression":
            if isinstance(self.intercept, list):
                raise ValueError("regression intercept must be a scalar")
            if any(isinstance(row, list) for row in self.coef) or len(self.coef) != n:
                raise ValueError(f"regression coef must be a flat vector of length {n}")
        else:
            if not isinstance(self.intercept, list):
                raise ValueError("classification intercept must be a list (one per class)")
            rows = self.coef
            if not all(isinstance(row, list) and len(row) == n for row in rows):
                raise ValueError(f"classification coef must be rows of length {n}")
            if len(rows) != len(self.intercept):
                raise ValueError("classification coef/intercept class count mismatch")
            if self.classes is not None and len(self.classes) != len(rows):
                raise ValueError("classes length must match coef rows")
        return self

    def scaled(self, feats: Mapping[str, float]) -> Optional[List[float]]:
        out = []
        for name in self.features:
            if name not in feats:
                return None
            mean = float(self.scaler.mean.get(name, 0.0))
            scale = float(self.scaler.scale.get(name, 1.0)) or 1.0
            out.append((float(feats[name]) - mean) / scale)
        return out

    def predict_value(self, feats: Mapping[str, float]) -> Optional[float]:
        z = self.scaled(feats)
        if z is None or self.type != "regression":
            return None
        return float(self.intercept) + sum(float(c) * x for c, x in zip(self.coef, z))

    def predict_class(self, feats: Mapping[str, float]) -> Optional[str]:
        z = self.scaled(feats)
        if z is None or self.type != "classification":
            return None
        logits = [
            float(b) + sum(float(c) * x for c, x in zip(row, z))
            for row, b in zip(self.coef, self.intercept)
        ]
        idx = max(range(len(logits)), key=logits.__getitem__)
        return self.classes[idx] if self.classes else str(idx)


class ArtifactModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pressure: Optional[SklearnSubModel] = None
    efficiency: Optional[SklearnSubModel] = None
    cycle_time: Optional[SklearnSubModel] = Field(default=None, alias="cycleTime")
    health: Optional[SklearnSubModel] = None

    @model_validator(mode="after")
    def _at_least_one_metric(self) -> "ArtifactModel":
        if self.pressure is None and self.efficiency is None and self.cycle_time is None:
            raise ValueError("artifact must contain at least one of pressure/efficiency/cycleTime")
        if self.health is not None and self.health.type != "classification":
            raise ValueError("health sub-model must be a classification model")
        return self

    def _sub(self, metric: str) -> Optional[SklearnSubModel]:
        return {"pressure": self.pressure, "efficiency": self.efficiency, "cycleTime": self.cycle_time}[metric]

    def evaluate(self, metric: str, inp: InputModel) -> Tuple[Optional[float], List[TermContribution]]:
        sub = self._sub(metric)
        if sub is None:
            return None, []
        feats = artifact_features(inp)
        z = sub.scaled(feats)
        if z is None:
            missing = [f for f in sub.features if f not in feats]
            logger.warning("artifact %s: unknown features %s", metric, missing)
            return None, []
        parts = [TermContribution(metric, "intercept", float(sub.intercept), 1.0, float(sub.intercept))]
        for name, c, x in zip(sub.features, sub.coef, z):
            parts.append(TermContribution(metric, f"z({name})", float(c), x, float(c) * x))
        return sub.predict_value(feats), parts

    def r_squared_for(self, metric: str) -> Optional[float]:
        sub = self._sub(metric)
        return None if sub is None else sub.r_squared

    def classify_health(self, inp: InputModel) -> Optional[str]:
        if self.health is None:
            return None
        return self.health.predict_class(artifact_features(inp))


# ---------- Встроенный набор (fallback) ----------

# Коэффициенты подобраны под типовой пресс (D=6.5 см, d=3 см, 2/8 т,
# 1500 об/мин, η=0.9, 5 бар потерь) и дают ненулевую чувствительность
# по всем настраиваемым параметрам. R² занижены намеренно: это оценка,
# а не обученная модель, поэтому уверенность прогноза по ним "low".
FALLBACK_PAYLOAD: Dict[str, Any] = {
    "pressure": {
        "intercept": 60.0,
        "linear": {"boreCm": -22.0, "rodCm": 4.0, "deadLoadTon": 6.0, "holdingLoadTon": 24.0, "systemLossBar": 1.0},
        "quadratic": {"boreCm": 0.9},
    },
    "efficiency": {
        "intercept": 0.12,
        "linear": {"pumpEfficiency": 0.78, "motorRpm": -2.0e-5, "systemLossBar": -0.006, "boreCm": 0.004},
    },
    "cycleTime": {
        "intercept": 14.0,
        "linear": {"motorRpm": -0.0025, "boreCm": 0.35, "rodCm": -0.2, "pumpEfficiency": -2.0},
        "quadratic": {"motorRpm": 4.0e-7},
    },
    "rSquared": {"pressure": 0.84, "efficiency": 0.80, "cycleTime": 0.82},
    "modelMetadata": {
        "trainingDataPoints": 0,
        "lastUpdated": "embedded",
        "validationScore": None,
        "featureImportance": {},
    },
}


def embedded_fallback() -> RegressionCoefficients:
    return RegressionCoefficients.model_validate(FALLBACK_PAYLOAD)
