"""
Live Event Hubs test resource services.

    LiveEventHubsSession   - one per test run; owns the namespace
    LiveResourceManager    - shared collaborator (tokens, clients, retries)
    EventHubScopeManager   - acquire / release per-test Event Hubs
    EventHubScope          - handle for one acquired Event Hub
    NamespaceProperties    - handle for the run's namespace
"""

from .namespace import NamespaceProperties, parse_namespace_properties, generate_namespace_name
from .resource_manager import LiveResourceManager, generate_resource_tags
from .eventhub_scope import (
    EventHubScope,
    EventHubScopeManager,
    generate_event_hub_name,
    truncate_caller_tag,
)
from .live_session import LiveEventHubsSession

__all__ = [
    "NamespaceProperties",
    "parse_namespace_properties",
    "generate_namespace_name",
    "LiveResourceManager",
    "generate_resource_tags",
    "EventHubScope",
    "EventHubScopeManager",
    "generate_event_hub_name",
    "truncate_caller_tag",
    "LiveEventHubsSession",
]
