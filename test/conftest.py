"""
Test Configuration and Fixtures

This module provides:
- Test environment (in-memory store, no background sweepers) set before any app import
- `client` / `context` fixtures for API and BDD tests
- Store and DI-override cleanup between tests
- BDD step definitions (imported from bdd_steps_loader.py)

Architecture:
- Unit tests (test/**/unit/): build use cases directly over an in-memory unit of work
- Integration tests (test/**/integration/): TestClient over the app factory, or
  SQLAlchemy repositories on a temporary sqlite+aiosqlite database
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings are instantiated at import time of src.platform.config.core_setting
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    os.environ['STORE_BACKEND'] = 'memory'
    os.environ['ENABLE_EXPIRY_SWEEPER'] = 'false'
    os.environ['CREATE_TABLES_ON_STARTUP'] = 'false'
    os.environ['PAYMENT_VERIFIER_URL'] = ''
    os.environ['OWNERSHIP_ORACLE_URL'] = ''

    # Large enough that the inventory check, not the per-order cap, decides
    os.environ['MAX_TICKETS_PER_ORDER'] = '10'
    os.environ['MAX_TICKETS_PER_BUYER'] = '20'

    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)


_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402
from typing import Any  # noqa: E402

from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402

from src.platform.config.di import container  # noqa: E402


# =============================================================================
# Session-scoped Fixtures
# =============================================================================
@pytest.fixture(scope='session')
def client() -> Generator[TestClient, None, None]:
    from test.test_main import app

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


# =============================================================================
# Per-test state
# =============================================================================
@pytest.fixture
def context() -> dict[str, Any]:
    """Unified BDD state: responses, created ids, addresses."""
    return {}


@pytest.fixture(autouse=True)
def clean_in_memory_store() -> Generator[None, None, None]:
    container.in_memory_store().clear()
    yield
    container.in_memory_store().clear()


@pytest.fixture(autouse=True)
def reset_container_overrides() -> Generator[None, None, None]:
    yield
    container.clock.reset_override()
    container.payment_verifier.reset_override()
    container.ownership_oracle.reset_override()


# =============================================================================
# Load BDD steps and shared fixtures
# =============================================================================
from test.bdd_steps_loader import *  # noqa: E402, F401, F403
from test.fixture_loader import *  # noqa: E402, F401, F403
