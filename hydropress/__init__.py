"""hydropress package.

Важно: пакет не должен иметь побочных эффектов при импорте.
Поэтому здесь нет eager-import'ов (pandas/requests/pydantic подтягиваются
только теми модулями, которым они нужны).

Импортируй нужное напрямую:
- from hydropress.simulator import run_simulation
- from hydropress.energy import aggregate_energy_by_phase
- from hydropress.advisor.model import PerformanceModel
- from hydropress.advisor.sensitivity import SensitivityAdvisor
"""

from __future__ import annotations

__all__: list[str] = []
