"""Pytest configuration and shared fixtures.

This configuration provides:
1. A Casbin RBAC model with p, g and g2 sections
2. An in-memory fake MongoDB database per test
3. Test settings that never read a developer's environment
4. A mock logger whose bind() returns itself, so calls can be asserted
"""

from unittest.mock import Mock

import pytest
from casbin.model import Model

from policy_store.core.config import Settings
from policy_store.core.enums import Environment
from policy_store.infrastructure.persistence import MongoAdapter
from tests.utils.fake_mongo import FakeDatabase

RBAC_MODEL_TEXT = """
[request_definition]
r = sub, obj, act

[policy_definition]
p = sub, obj, act

[role_definition]
g = _, _
g2 = _, _

[policy_effect]
e = some(where (p.eft == allow))

[matchers]
m = g(r.sub, p.sub) && g2(r.obj, p.obj) && r.act == p.act
"""


def new_model() -> Model:
    """Build a fresh Casbin model with p, g and g2 declared."""
    model = Model()
    model.load_model_from_text(RBAC_MODEL_TEXT)
    return model


@pytest.fixture
def rbac_model() -> Model:
    """Provide an empty Casbin RBAC model."""
    return new_model()


@pytest.fixture
def test_settings() -> Settings:
    """Provide settings with short timeouts for tests."""
    return Settings(
        environment=Environment.TESTING,
        mongo_url="mongodb://localhost:27017",
        connect_timeout_seconds=2.0,
        load_timeout_seconds=2.0,
        operation_timeout_seconds=2.0,
    )


@pytest.fixture
def mock_logger():
    """Provide a mock logger for testing.

    bind() returns the same mock so calls made through a bound logger can be
    asserted on the fixture directly.

    Usage:
        def test_something(mock_logger):
            adapter = MongoAdapter(db, logger=mock_logger)
            mock_logger.info.assert_called_once()
    """
    logger = Mock()
    logger.info = Mock()
    logger.debug = Mock()
    logger.error = Mock()
    logger.warning = Mock()
    logger.bind = Mock(return_value=logger)
    return logger


@pytest.fixture
def fake_database() -> FakeDatabase:
    """Provide an empty in-memory database."""
    return FakeDatabase()


@pytest.fixture
async def adapter(fake_database, test_settings, mock_logger) -> MongoAdapter:
    """Provide an adapter opened on the fake database (borrowed handle)."""
    return await MongoAdapter.from_database(
        fake_database, settings=test_settings, logger=mock_logger
    )


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with real MongoDB"
    )
