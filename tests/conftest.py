"""Pytest configuration.

Goal: make `import hydropress` work reliably when running tests without installing
package (editable install).

This repo uses a flat layout (hydropress/ at repo root). Some environments run
pytest with a working directory where repo root isn't on sys.path, leading to
`ModuleNotFoundError: hydropress`.

This conftest ensures repo root is on sys.path and provides the default press
input used across the suite.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from hydropress.core.types import InputModel  # noqa: E402


@pytest.fixture()
def press_input() -> InputModel:
    return InputModel(
        bore_cm=6.5,
        rod_cm=3.0,
        dead_load_ton=2.0,
        holding_load_ton=8.0,
        motor_rpm=1500.0,
        pump_efficiency=0.9,
        system_loss_bar=5.0,
    )
