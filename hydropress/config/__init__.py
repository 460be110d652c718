"""Конфиги пресса.

Все конфиги — frozen dataclass'ы с разумными значениями по умолчанию.
Пороговые значения (уверенность, границы параметров, качество модели)
живут здесь, а не константами внутри алгоритмов.
"""

from __future__ import annotations

from .models import (  # noqa: F401
    DEFAULT_PHASES,
    AdvisorConfig,
    ConfidenceConfig,
    CycleConfig,
    ModelSourceConfig,
    ParameterBounds,
    PhaseProfile,
    PressConfig,
)

__all__ = [
    "PhaseProfile",
    "DEFAULT_PHASES",
    "CycleConfig",
    "ModelSourceConfig",
    "ConfidenceConfig",
    "ParameterBounds",
    "AdvisorConfig",
    "PressConfig",
]
