"""hydropress.core.validation

Базовые проверки, чтобы ловить физически невозможные значения как можно раньше.

Ядро не «чинит» входные данные: нарушение предусловия — это отказ вызова.
"""

from __future__ import annotations

import math


class InvalidInput(ValueError):
    """Входной параметр вне допустимой области (<= 0, NaN, КПД > 1 ...)."""


class InvalidGeometry(InvalidInput):
    """Шток не меньше поршня: площадь кольцевой полости вырождается."""


def ensure_finite(value: float, name: str) -> None:
    if not math.isfinite(float(value)):
        raise InvalidInput(f"{name} must be finite, got {value}")


def ensure_positive(value: float, name: str) -> None:
    ensure_finite(value, name)
    if value <= 0:
        raise InvalidInput(f"{name} must be > 0, got {value}")


def ensure_in_range(value: float, min_value: float, max_value: float, name: str) -> None:
    ensure_finite(value, name)
    if not (min_value <= value <= max_value):
        raise InvalidInput(f"{name} must be in [{min_value}, {max_value}], got {value}")


def ensure_rod_smaller_than_bore(bore_cm: float, rod_cm: float) -> None:
    if rod_cm >= bore_cm:
        raise InvalidGeometry(f"rod_cm must be < bore_cm, got rod={rod_cm} bore={bore_cm}")
