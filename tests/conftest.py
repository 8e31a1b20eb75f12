"""
Shared test configuration.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.elasticity.elasticity_config import ElasticityConfig, load_elasticity_config  # noqa: E402

ELASTICITY_ENV_VARS = (
    "ELASTICITY_API_BASE_URL",
    "ELASTICITY_API_PATH",
    "ELASTICITY_PRICE_COLUMN",
    "ELASTICITY_GROUP_COLUMNS",
    "ELASTICITY_DEFAULT_SECONDARY_VALUE",
    "ELASTICITY_SWEEP_PERCENT",
    "ELASTICITY_NUM_POINTS",
    "ELASTICITY_EPSILON",
    "ELASTICITY_PLACEHOLDER_VALUES",
    "ELASTICITY_REQUEST_TIMEOUT_SECONDS",
    "ELASTICITY_FALLBACK_TIMEOUT_SECONDS",
    "ELASTICITY_MAX_FALLBACK_ATTEMPTS",
    "ELASTICITY_MAX_CONCURRENT_MONTHS",
)


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure required environment variables are present during tests."""

    defaults = {
        "PROJECT_NAME": "test-project",
        "ENV": "test",
        "LOG_LEVEL": "INFO",
    }

    for key, value in defaults.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)
    for key in ELASTICITY_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def elasticity_config() -> ElasticityConfig:
    return load_elasticity_config(config_path=str(ROOT_DIR / "configs" / "elasticity_policy.yaml"))
