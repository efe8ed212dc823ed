"""
Config test fixtures - clean environment via monkeypatch.
"""

import pytest

from config import reset_config


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "EVENTHUBS_SUBSCRIPTION_ID", "EVENTHUBS_RESOURCE_GROUP",
        "EVENTHUBS_NAMESPACE_CONNECTION_STRING", "EVENTHUBS_EVENT_HUB_NAME",
        "EVENTHUBS_SHARED_ACCESS_KEY_NAME", "EVENTHUBS_MANAGEMENT_SCOPE",
        "EVENTHUBS_NAMESPACE_SKU", "EVENTHUBS_NAMESPACE_CAPACITY",
        "EVENTHUBS_MAX_THROUGHPUT_UNITS", "EVENTHUBS_RESOURCE_LIFETIME_HOURS",
        "EVENTHUBS_RETRY_MAX_ATTEMPTS", "EVENTHUBS_RETRY_BASE_DELAY",
        "EVENTHUBS_RETRY_MAX_DELAY",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()
