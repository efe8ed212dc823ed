"""
Event Hubs Live Test Configuration.

Provides configuration for:
    - Subscription and resource group holding test resources
    - Existing namespace / Event Hub overrides
    - Shape of the per-run namespace
    - Retry configuration for management operations

Resource Resolution:
    - EVENTHUBS_NAMESPACE_CONNECTION_STRING set: tests run in that namespace,
      nothing is created or deleted at the namespace level
    - Otherwise: a namespace is provisioned for the run and deleted at the end
    - EVENTHUBS_EVENT_HUB_NAME set: every scope binds to that Event Hub instead
      of creating one (requires a namespace connection string)

Exports:
    EventHubsTestConfig: Pydantic configuration model
"""

import os
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field

from .defaults import AzureDefaults, NamespaceDefaults, RetryDefaults


# ============================================================================
# EVENT HUBS TEST CONFIGURATION
# ============================================================================

class EventHubsTestConfig(BaseModel):
    """
    Configuration for live Event Hubs test resources.

    Subscription and resource group are required; everything else has a
    safe default in config.defaults.
    """

    # Azure placement
    subscription_id: str = Field(
        ...,
        min_length=1,
        description="Azure subscription containing the test resource group"
    )

    resource_group: str = Field(
        ...,
        min_length=1,
        description="Resource group in which namespaces are created"
    )

    # Existing resources
    namespace_connection_string: Optional[str] = Field(
        default=None,
        repr=False,
        description="Connection string of an existing namespace (skips namespace provisioning)"
    )

    event_hub_name: Optional[str] = Field(
        default=None,
        description="Existing Event Hub to bind every scope to (skips Event Hub provisioning)"
    )

    shared_access_key_name: str = Field(
        default=AzureDefaults.SHARED_ACCESS_KEY_NAME,
        description="Authorization rule whose keys are returned for a provisioned namespace"
    )

    management_scope: str = Field(
        default=AzureDefaults.MANAGEMENT_SCOPE,
        description="OAuth scope requested for management tokens"
    )

    # Namespace shape
    namespace_sku: str = Field(
        default=NamespaceDefaults.SKU,
        description="SKU name and tier of provisioned namespaces"
    )

    namespace_capacity: int = Field(
        default=NamespaceDefaults.CAPACITY,
        ge=1,
        le=40,
        description="Throughput units allocated to provisioned namespaces"
    )

    auto_inflate_enabled: bool = Field(
        default=NamespaceDefaults.AUTO_INFLATE_ENABLED,
        description="Enable auto-inflate on provisioned namespaces"
    )

    maximum_throughput_units: int = Field(
        default=NamespaceDefaults.MAXIMUM_THROUGHPUT_UNITS,
        ge=1,
        le=40,
        description="Auto-inflate upper bound for provisioned namespaces"
    )

    resource_lifetime_hours: int = Field(
        default=NamespaceDefaults.RESOURCE_LIFETIME_HOURS,
        ge=1,
        description="Hours until a provisioned namespace is tagged as safe to delete"
    )

    # Retry configuration
    retry_max_attempts: int = Field(
        default=RetryDefaults.MAX_ATTEMPTS,
        ge=1,
        le=20,
        description="Attempts per management operation (including the first)"
    )

    retry_base_delay_seconds: float = Field(
        default=RetryDefaults.BASE_DELAY_SECONDS,
        ge=0,
        description="Base delay in seconds for exponential backoff (first retry)"
    )

    retry_max_delay_seconds: float = Field(
        default=RetryDefaults.MAX_DELAY_SECONDS,
        ge=0,
        description="Upper bound for a single backoff delay"
    )

    @property
    def uses_existing_namespace(self) -> bool:
        return bool(self.namespace_connection_string)

    @property
    def uses_existing_event_hub(self) -> bool:
        return bool(self.event_hub_name)

    def debug_dict(self) -> Dict[str, Any]:
        """Configuration as a dict with the connection string masked."""
        values = self.model_dump()
        if values.get("namespace_connection_string"):
            values["namespace_connection_string"] = "***MASKED***"
        return values

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            subscription_id=os.environ.get("EVENTHUBS_SUBSCRIPTION_ID", ""),
            resource_group=os.environ.get("EVENTHUBS_RESOURCE_GROUP", ""),
            namespace_connection_string=os.environ.get("EVENTHUBS_NAMESPACE_CONNECTION_STRING") or None,
            event_hub_name=os.environ.get("EVENTHUBS_EVENT_HUB_NAME") or None,
            shared_access_key_name=os.environ.get(
                "EVENTHUBS_SHARED_ACCESS_KEY_NAME",
                AzureDefaults.SHARED_ACCESS_KEY_NAME
            ),
            management_scope=os.environ.get("EVENTHUBS_MANAGEMENT_SCOPE", AzureDefaults.MANAGEMENT_SCOPE),
            namespace_sku=os.environ.get("EVENTHUBS_NAMESPACE_SKU", NamespaceDefaults.SKU),
            namespace_capacity=int(os.environ.get(
                "EVENTHUBS_NAMESPACE_CAPACITY", str(NamespaceDefaults.CAPACITY)
            )),
            maximum_throughput_units=int(os.environ.get(
                "EVENTHUBS_MAX_THROUGHPUT_UNITS", str(NamespaceDefaults.MAXIMUM_THROUGHPUT_UNITS)
            )),
            resource_lifetime_hours=int(os.environ.get(
                "EVENTHUBS_RESOURCE_LIFETIME_HOURS", str(NamespaceDefaults.RESOURCE_LIFETIME_HOURS)
            )),
            retry_max_attempts=int(os.environ.get(
                "EVENTHUBS_RETRY_MAX_ATTEMPTS", str(RetryDefaults.MAX_ATTEMPTS)
            )),
            retry_base_delay_seconds=float(os.environ.get(
                "EVENTHUBS_RETRY_BASE_DELAY", str(RetryDefaults.BASE_DELAY_SECONDS)
            )),
            retry_max_delay_seconds=float(os.environ.get(
                "EVENTHUBS_RETRY_MAX_DELAY", str(RetryDefaults.MAX_DELAY_SECONDS)
            )),
        )
