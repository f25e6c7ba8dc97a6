"""Shared pytest setup.

Unit and e2e tests run on in-memory SQLite and need nothing external.
Tests marked ``integration`` start a PostgreSQL container and are skipped
unless enabled:

    pytest --run-integration        # or RUN_INTEGRATION=1
    pytest --run-all                # or RUN_ALL_TESTS=1
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from gatehouse_config import clear_settings_cache

_TRUTHY = {"1", "true", "yes"}

_MARKERS = {
    "integration": "needs PostgreSQL through Testcontainers; skipped by default",
    "slow": "takes longer than a second",
}


def _load_local_env() -> None:
    config_dir = Path(__file__).resolve().parents[1] / "config"
    for name in (".env.dev", ".env"):
        env_file = config_dir / name
        if env_file.exists():
            load_dotenv(env_file)
            return


_load_local_env()
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-gatehouse-tests")


def _enabled(config, option: str, env_var: str) -> bool:
    if config.getoption(option):
        return True
    return os.environ.get(env_var, "").strip().lower() in _TRUTHY


def pytest_addoption(parser):
    group = parser.getgroup("gatehouse")
    group.addoption(
        "--run-integration",
        action="store_true",
        help="also run tests marked integration",
    )
    group.addoption(
        "--run-all",
        action="store_true",
        help="run every collected test",
    )


def pytest_configure(config):
    for name, description in _MARKERS.items():
        config.addinivalue_line("markers", f"{name}: {description}")


def pytest_collection_modifyitems(config, items):
    if _enabled(config, "--run-all", "RUN_ALL_TESTS"):
        return
    if _enabled(config, "--run-integration", "RUN_INTEGRATION"):
        return

    skip = pytest.mark.skip(reason="needs --run-integration or RUN_INTEGRATION=1")
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def fresh_settings():
    """Start and finish the run without cached settings."""
    clear_settings_cache()
    yield
    clear_settings_cache()
