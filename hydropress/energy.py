"""Энергия по фазам цикла.

Энергия (кДж) = мощность (кВт) × время (с), т.к. 1 кВт·с = 1 кДж.
Для каждой точки dt = max(0.001, t_next − t); у последней точки t_next = t.
Точки без фазы относятся к "Working".
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np
import pandas as pd

from hydropress.core.types import DataPoint, Phase, PhaseEnergy

MIN_DT_S = 0.001
DEFAULT_PHASE = Phase.WORKING.value


def _phase_name(p: DataPoint) -> str:
    if p.phase is None:
        return DEFAULT_PHASE
    return str(getattr(p.phase, "value", p.phase))


def aggregate_energy_by_phase(data: Sequence[DataPoint]) -> List[PhaseEnergy]:
    if not data:
        return []

    time = np.array([p.time_s for p in data], dtype=np.float64)
    power = np.array([p.hyd_power_kw for p in data], dtype=np.float64)

    t_next = np.append(time[1:], time[-1])
    dt = np.maximum(MIN_DT_S, t_next - time)

    df = pd.DataFrame(
        {
            "phase": [_phase_name(p) for p in data],
            "dt": dt,
            "power": power,
            "energy": power * dt,
        }
    )

    # sort=False: порядок групп = порядок первого появления фазы
    agg = df.groupby("phase", sort=False).agg(
        energy_kj=("energy", "sum"),
        duration_s=("dt", "sum"),
        avg_power_kw=("power", "mean"),
    )

    return [
        PhaseEnergy(
            phase=str(phase),
            energy_kj=round(float(row.energy_kj), 2),
            duration_s=round(float(row.duration_s), 2),
            avg_power_kw=round(float(row.avg_power_kw), 2),
        )
        for phase, row in agg.iterrows()
    ]
