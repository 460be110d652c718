"""hydropress.core.units

Минимальный слой единиц измерения и удобных множителей.

Принцип: везде, где есть числа, должна быть явная единица.
Пресс описывается в «цеховых» единицах (см, тонны, бар, л/мин, кВт),
а внутри формул всё приводится к СИ через эти множители.
"""

from __future__ import annotations

# Base units (conceptual SI multipliers)
METER: float = 1.0
KILOGRAM: float = 1.0
SECOND: float = 1.0

# Derived units
NEWTON: float = KILOGRAM * METER / (SECOND**2)
PASCAL: float = NEWTON / (METER**2)

# Convenience multipliers
BAR: float = 1e5 * PASCAL
CM: float = 1e-2 * METER
MM: float = 1e-3 * METER
LITRE: float = 1e-3 * (METER**3)
TONNE: float = 1000.0 * KILOGRAM
KW: float = 1000.0  # W

SECONDS_PER_MINUTE: float = 60.0
CC_PER_LITRE: float = 1000.0

# q[л/мин] * p[бар] / 600 = N[кВт]
LPM_BAR_PER_KW: float = 600.0

# Useful constants
G: float = 9.81 * METER / (SECOND**2)
