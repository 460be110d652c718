"""Кэш коэффициентов модели.

Жизненный цикл: EMPTY -> LOADING -> READY (внешний источник) или
FALLBACK (встроенный набор). Обновляется только явным reload().

Контракт конкурентности:
- загрузка одна на всех: пока идёт LOADING, остальные вызывающие ждут
  на Condition и получают тот же снапшот;
- каждая загрузка помечена поколением; reload() увеличивает поколение,
  и результат устаревшей загрузки отбрасывается.

Порядок источников: удалённый URL -> локальный артефакт -> встроенный набор.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional
import logging
import threading

from hydropress.advisor.coefficients import CoefficientModel, embedded_fallback
from hydropress.advisor.sources import FetchResult, fetch_remote_coefficients, load_artifact
from hydropress.config.models import ModelSourceConfig

logger = logging.getLogger(__name__)


class CacheState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CoefficientSnapshot:
    coefficients: CoefficientModel
    source: str                  # remote | artifact | fallback
    generation: int
    reason: Optional[str] = None  # почему пришлось откатиться на fallback


class CoefficientCache:
    def __init__(
        self,
        cfg: ModelSourceConfig | None = None,
        *,
        fetcher: Callable[[ModelSourceConfig], FetchResult] = fetch_remote_coefficients,
        artifact_loader: Callable[[str], FetchResult] = load_artifact,
    ) -> None:
        self.cfg = cfg or ModelSourceConfig()
        self._fetcher = fetcher
        self._artifact_loader = artifact_loader

        self._cond = threading.Condition()
        self._state = CacheState.EMPTY
        self._snapshot: Optional[CoefficientSnapshot] = None
        self._generation = 0

    @property
    def state(self) -> CacheState:
        with self._cond:
            return self._state

    @property
    def source(self) -> Optional[str]:
        with self._cond:
            return None if self._snapshot is None else self._snapshot.source

    def get(self) -> CoefficientSnapshot:
        """Снапшот коэффициентов; первый вызов запускает загрузку."""

        with self._cond:
            while True:
                if self._snapshot is not None and self._state in (CacheState.READY, CacheState.FALLBACK):
                    return self._snapshot
                if self._state == CacheState.LOADING:
                    self._cond.wait()
                    continue
                self._state = CacheState.LOADING
                generation = self._generation
                break

        return self._publish(self._load(generation))

    def reload(self) -> CoefficientSnapshot:
        """Принудительно перечитать источники (единственный способ обновить кэш)."""

        with self._cond:
            self._generation += 1
            generation = self._generation
            self._state = CacheState.LOADING
        logger.info("coefficient reload requested (generation %d)", generation)
        return self._publish(self._load(generation))

    def _publish(self, snap: CoefficientSnapshot) -> CoefficientSnapshot:
        with self._cond:
            if snap.generation != self._generation:
                logger.info(
                    "discarding stale coefficient load (generation %d, current %d)",
                    snap.generation, self._generation,
                )
                while self._state == CacheState.LOADING:
                    self._cond.wait()
                if self._snapshot is None:
                    raise RuntimeError("coefficient cache has no snapshot after a superseding load")
                return self._snapshot

            self._snapshot = snap
            self._state = CacheState.FALLBACK if snap.source == "fallback" else CacheState.READY
            self._cond.notify_all()
            return snap

    def _load(self, generation: int) -> CoefficientSnapshot:
        cfg = self.cfg
        reasons = []

        try:
            if cfg.url:
                res = self._fetcher(cfg)
                if res.ok:
                    return CoefficientSnapshot(res.coefficients, "remote", generation)
                reasons.append(f"remote: {res.error}")

            if cfg.artifact_path:
                res = self._artifact_loader(cfg.artifact_path)
                if res.ok:
                    return CoefficientSnapshot(res.coefficients, "artifact", generation)
                reasons.append(f"artifact: {res.error}")
        except Exception as e:  # noqa: BLE001
            # прогноз обязан вернуть результат: сбой источника -> fallback
            logger.exception("coefficient source crashed")
            reasons.append(f"source error: {e}")

        reason = "; ".join(reasons) or "no source configured"
        if reasons:
            logger.warning("using embedded fallback coefficients (%s)", reason)
        else:
            logger.info("using embedded fallback coefficients (%s)", reason)
        return CoefficientSnapshot(embedded_fallback(), "fallback", generation, reason=reason)
