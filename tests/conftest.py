"""
Root conftest.py - sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
and exercised without Azure credentials. Management calls go to the
in-memory fakes in tests/factories/management_fakes.py.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'config', 'infrastructure', 'services', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import EventHubsTestConfig  # noqa: E402
from infrastructure.retry import RetryPolicy  # noqa: E402
from services import EventHubScopeManager, LiveResourceManager  # noqa: E402
from tests.factories.management_fakes import (  # noqa: E402
    TEST_NAMESPACE,
    TEST_RESOURCE_GROUP,
    TEST_SUBSCRIPTION_ID,
    FakeEventHubsState,
    FakeManagementRepository,
    FakeTokenProvider,
)


@pytest.fixture(autouse=True, scope="session")
def set_minimal_env_vars():
    """
    Set minimal environment variables so get_config() succeeds in tests
    that do not build their own configuration.
    """
    defaults = {
        "EVENTHUBS_SUBSCRIPTION_ID": TEST_SUBSCRIPTION_ID,
        "EVENTHUBS_RESOURCE_GROUP": TEST_RESOURCE_GROUP,
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


@pytest.fixture
def make_config():
    """Factory fixture: EventHubsTestConfig with test placement and overrides."""
    def _make(**overrides) -> EventHubsTestConfig:
        values = {
            "subscription_id": TEST_SUBSCRIPTION_ID,
            "resource_group": TEST_RESOURCE_GROUP,
        }
        values.update(overrides)
        return EventHubsTestConfig(**values)
    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def azure_state():
    return FakeEventHubsState()


@pytest.fixture
def client_factory(azure_state):
    def _create(credential):
        return FakeManagementRepository(azure_state, credential)
    return _create


@pytest.fixture
def token_provider():
    return FakeTokenProvider()


@pytest.fixture
def retry_policy_factory():
    """Three attempts, no backoff delay."""
    return lambda: RetryPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0)


@pytest.fixture
def make_resource_manager(token_provider, client_factory, retry_policy_factory):
    def _make(config: EventHubsTestConfig) -> LiveResourceManager:
        return LiveResourceManager(config, token_provider, client_factory, retry_policy_factory)
    return _make


@pytest.fixture
def resource_manager(make_resource_manager, config):
    return make_resource_manager(config)


@pytest.fixture
def scope_manager(resource_manager):
    return EventHubScopeManager(resource_manager, TEST_NAMESPACE)
