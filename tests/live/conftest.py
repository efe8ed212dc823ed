"""
Live test fixtures - real Azure resources.

Skipped unless EVENTHUBS_LIVE_TESTS=true. Requires EVENTHUBS_SUBSCRIPTION_ID,
EVENTHUBS_RESOURCE_GROUP and a DefaultAzureCredential identity with
Contributor on the resource group.
"""

import os

import pytest
import pytest_asyncio

from config import reset_config
from services import LiveEventHubsSession


def pytest_collection_modifyitems(config, items):
    if os.environ.get("EVENTHUBS_LIVE_TESTS", "").lower() == "true":
        return
    skip_live = pytest.mark.skip(reason="set EVENTHUBS_LIVE_TESTS=true to run against Azure")
    for item in items:
        if "tests/live" in item.nodeid:
            item.add_marker(skip_live)


@pytest_asyncio.fixture(scope="session", loop_scope="session")
async def eventhubs_session():
    """One namespace (provisioned or referenced) for the whole live run."""
    reset_config()
    async with LiveEventHubsSession() as session:
        yield session
