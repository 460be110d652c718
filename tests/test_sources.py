import json

import pytest
import requests

from hydropress.advisor.coefficients import ArtifactModel, RegressionCoefficients
from hydropress.advisor.sources import fetch_remote_coefficients, load_artifact, validate_remote_payload
from hydropress.config.models import ModelSourceConfig

from test_coefficients import _artifact_payload, remote_payload


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, broken_json: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._broken = broken_json

    def json(self):
        if self._broken:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload


class FakeSession:
    """Отдаёт заранее заданные ответы (или исключения) по очереди."""

    def __init__(self, *outcomes) -> None:
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    def __init__(self) -> None:
        self.delays = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture()
def cfg() -> ModelSourceConfig:
    return ModelSourceConfig(url="http://models.local/ml_coefficients.json", timeout_s=6.0, attempts=3, backoff_s=0.5)


class TestRemoteFetch:
    def test_success(self, cfg):
        session = FakeSession(FakeResponse(payload=remote_payload()))
        res = fetch_remote_coefficients(cfg, session=session, sleep=SleepRecorder())
        assert res.ok
        assert res.source == "remote"
        assert res.attempts == 1
        assert isinstance(res.coefficients, RegressionCoefficients)
        assert session.calls == [(cfg.url, 6.0)]

    def test_retries_transient_then_succeeds(self, cfg):
        sleep = SleepRecorder()
        session = FakeSession(
            requests.ConnectionError("refused"),
            FakeResponse(status_code=503),
            FakeResponse(payload=remote_payload()),
        )
        res = fetch_remote_coefficients(cfg, session=session, sleep=sleep)
        assert res.ok
        assert res.attempts == 3
        assert sleep.delays == [0.5, 1.0]

    def test_retries_exhausted(self, cfg):
        sleep = SleepRecorder()
        session = FakeSession(
            requests.Timeout("slow"),
            FakeResponse(broken_json=True),
            FakeResponse(status_code=500),
        )
        res = fetch_remote_coefficients(cfg, session=session, sleep=sleep)
        assert not res.ok
        assert res.error.startswith("retries exhausted")
        assert "HTTP 500" in res.error
        assert res.attempts == 3
        # после последней попытки не спим
        assert sleep.delays == [0.5, 1.0]

    def test_client_error_is_not_retried(self, cfg):
        session = FakeSession(FakeResponse(status_code=404))
        res = fetch_remote_coefficients(cfg, session=session, sleep=SleepRecorder())
        assert not res.ok
        assert res.error == "HTTP 404"
        assert len(session.calls) == 1

    def test_quality_rejection_is_not_retried(self, cfg):
        session = FakeSession(FakeResponse(payload=remote_payload(r2=0.5)))
        res = fetch_remote_coefficients(cfg, session=session, sleep=SleepRecorder())
        assert not res.ok
        assert res.error.startswith("quality:")
        assert len(session.calls) == 1

    def test_schema_rejection(self, cfg):
        payload = remote_payload()
        payload["pressure"]["intercept"] = "oops"
        session = FakeSession(FakeResponse(payload=payload))
        res = fetch_remote_coefficients(cfg, session=session, sleep=SleepRecorder())
        assert not res.ok
        assert res.error.startswith("schema:")

    def test_no_url(self):
        res = fetch_remote_coefficients(ModelSourceConfig(), session=FakeSession(), sleep=SleepRecorder())
        assert not res.ok
        assert res.attempts == 0


def test_validate_remote_payload_thresholds_from_config():
    payload = remote_payload(r2=0.75, n=2000)
    validate_remote_payload(payload, ModelSourceConfig())
    with pytest.raises(ValueError, match="quality"):
        validate_remote_payload(payload, ModelSourceConfig(min_r_squared=0.8))


class TestArtifact:
    def test_load(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(json.dumps(_artifact_payload()), encoding="utf-8")
        res = load_artifact(path)
        assert res.ok
        assert res.source == "artifact"
        assert isinstance(res.coefficients, ArtifactModel)

    def test_missing_file(self, tmp_path):
        res = load_artifact(tmp_path / "absent.json")
        assert not res.ok
        assert res.error.startswith("unreadable artifact")

    def test_broken_json(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text("{not json", encoding="utf-8")
        assert not load_artifact(path).ok

    def test_schema_failure(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(json.dumps({"health": _artifact_payload()["health"]}), encoding="utf-8")
        res = load_artifact(path)
        assert not res.ok
        assert res.error.startswith("schema")
