"""Советник по производительности пресса.

- coefficients: pydantic-схемы коэффициентов и встроенный fallback;
- sources: удалённый HTTP-источник и локальный артефакт;
- cache: кэш коэффициентов (одна загрузка на всех, reload по запросу);
- model: PerformanceModel.predict;
- sensitivity: SensitivityAdvisor.suggest.

Импорт пакета ничего не загружает и не ходит в сеть.
"""

from __future__ import annotations

__all__ = [
    "coefficients",
    "sources",
    "cache",
    "model",
    "sensitivity",
]
