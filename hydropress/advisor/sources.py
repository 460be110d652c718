"""Источники коэффициентов: удалённый HTTP и локальный артефакт.

Функции отсюда никогда не бросают исключений наружу: любой отказ
(сеть, таймаут, битый JSON, схема, качество) превращается в
FetchResult с причиной. Решение «что делать дальше» принимает кэш.

Повторы только для транзиентных отказов (соединение, таймаут, HTTP 5xx,
непарсящийся ответ). Ответ, который распарсился, но не прошёл схему или
пороги качества, повторять бессмысленно.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional
import json
import logging
import time

import requests
from pydantic import ValidationError

from hydropress.advisor.coefficients import ArtifactModel, CoefficientModel, RegressionCoefficients, quality_issues
from hydropress.config.models import ModelSourceConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    coefficients: Optional[CoefficientModel] = None
    source: str = ""
    error: Optional[str] = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.coefficients is not None and self.error is None

    @classmethod
    def success(cls, coefficients: CoefficientModel, source: str, attempts: int = 1) -> "FetchResult":
        return cls(coefficients=coefficients, source=source, attempts=attempts)

    @classmethod
    def failure(cls, reason: str, source: str, attempts: int = 0) -> "FetchResult":
        return cls(source=source, error=reason, attempts=attempts)


class _Transient(Exception):
    pass


def _get_json(session: Any, url: str, timeout_s: float) -> Any:
    try:
        response = session.get(url, timeout=timeout_s)
    except (requests.ConnectionError, requests.Timeout) as e:
        raise _Transient(f"{type(e).__name__}: {e}") from e
    except requests.RequestException as e:
        raise ValueError(f"request failed: {e}") from e

    status = int(response.status_code)
    if status >= 500:
        raise _Transient(f"HTTP {status}")
    if status >= 400:
        raise ValueError(f"HTTP {status}")

    try:
        return response.json()
    except ValueError as e:
        # обрезанный/битый ответ: обычно транзиентный сбой прокси
        raise _Transient(f"invalid JSON body: {e}") from e


def validate_remote_payload(payload: Any, cfg: ModelSourceConfig) -> RegressionCoefficients:
    """Схема + пороги качества. ValueError с причиной, если не годится."""

    try:
        coeffs = RegressionCoefficients.model_validate(payload)
    except ValidationError as e:
        raise ValueError(f"schema: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e

    issues = quality_issues(coeffs, cfg.min_r_squared, cfg.min_training_points)
    if issues:
        raise ValueError("quality: " + "; ".join(issues))
    return coeffs


def fetch_remote_coefficients(
    cfg: ModelSourceConfig,
    *,
    session: Any | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FetchResult:
    if not cfg.url:
        return FetchResult.failure("no remote url configured", source="remote")

    session = session or requests.Session()
    attempts = max(1, int(cfg.attempts))
    last_error = "not attempted"

    for attempt in range(attempts):
        try:
            payload = _get_json(session, cfg.url, cfg.timeout_s)
            coeffs = validate_remote_payload(payload, cfg)
        except _Transient as e:
            last_error = str(e)
            logger.warning("coefficient fetch attempt %d/%d failed: %s", attempt + 1, attempts, last_error)
            if attempt + 1 < attempts:
                sleep(cfg.backoff_s * (2**attempt))
            continue
        except ValueError as e:
            logger.warning("coefficient payload rejected: %s", e)
            return FetchResult.failure(str(e), source="remote", attempts=attempt + 1)

        logger.info(
            "loaded remote coefficients (n=%d, updated=%s)",
            coeffs.model_metadata.training_data_points,
            coeffs.model_metadata.last_updated,
        )
        return FetchResult.success(coeffs, source="remote", attempts=attempt + 1)

    return FetchResult.failure(f"retries exhausted: {last_error}", source="remote", attempts=attempts)


def load_artifact(path: str | Path) -> FetchResult:
    """Локальный sklearn-style JSON (вторичный источник)."""

    p = Path(path)
    try:
        payload = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("cannot read model artifact %s: %s", p, e)
        return FetchResult.failure(f"unreadable artifact: {e}", source="artifact", attempts=1)

    try:
        model = ArtifactModel.model_validate(payload)
    except ValidationError as e:
        logger.warning("model artifact %s rejected: %s", p, e.errors()[0]["msg"])
        return FetchResult.failure(f"schema: {e.error_count()} error(s)", source="artifact", attempts=1)

    logger.info("loaded model artifact %s", p)
    return FetchResult.success(model, source="artifact")
