"""
Configuration Defaults - Single source of truth for all default values.

FAIL-FAST DESIGN:
Subscription and resource group have NO defaults. They must always come
from the environment.

Organization:
    - AzureDefaults: management endpoint and access key defaults
    - NamespaceDefaults: shape of the per-run Event Hubs namespace
    - EventHubDefaults: naming rules for per-test Event Hubs
    - RetryDefaults: management operation retry settings

Required Environment Variables (will fail if not set):
    EVENTHUBS_SUBSCRIPTION_ID - Azure subscription holding the test resources
    EVENTHUBS_RESOURCE_GROUP - Resource group for namespaces

Usage:
    from config.defaults import NamespaceDefaults, RetryDefaults

    # In Pydantic Field definitions:
    namespace_capacity: int = Field(default=NamespaceDefaults.CAPACITY, ...)
"""


# =============================================================================
# AZURE DEFAULTS
# =============================================================================

class AzureDefaults:
    """Azure Resource Manager defaults (public cloud)."""

    # Token scope for Azure Resource Manager
    MANAGEMENT_SCOPE = "https://management.azure.com/.default"

    # Authorization rule created implicitly with every namespace
    SHARED_ACCESS_KEY_NAME = "RootManageSharedAccessKey"


# =============================================================================
# NAMESPACE DEFAULTS (session-level container)
# =============================================================================

class NamespaceDefaults:
    """
    Shape of the namespace provisioned once per test run.
    """

    NAME_PREFIX = "py-eventhubs-"
    SKU = "Standard"
    CAPACITY = 12
    AUTO_INFLATE_ENABLED = True
    MAXIMUM_THROUGHPUT_UNITS = 20

    # Namespace names are 6-50 characters
    NAME_MAX_LENGTH = 50

    # Value of the DeleteAfter tag (hours from creation)
    RESOURCE_LIFETIME_HOURS = 24


# =============================================================================
# EVENT HUB DEFAULTS (per-test primary resource)
# =============================================================================

class EventHubDefaults:
    """Naming rules for Event Hubs created by a scope."""

    # Leading characters of a uuid4 used as the random part of the name
    RANDOM_PREFIX_LENGTH = 13

    # Caller tags longer than this are truncated
    CALLER_TAG_MAX_LENGTH = 15

    # Azure limit for Event Hub entity names
    NAME_MAX_LENGTH = 256


# =============================================================================
# RETRY DEFAULTS
# =============================================================================

class RetryDefaults:
    """
    Retry settings for management operations.

    ARM rejects concurrent operations on the same namespace with 409 and
    throttles with 429, so a handful of attempts with backoff is normal.
    """

    MAX_ATTEMPTS = 5
    BASE_DELAY_SECONDS = 1.0
    MAX_DELAY_SECONDS = 30.0

    # HTTP status codes treated as transient
    TRANSIENT_STATUS_CODES = (408, 409, 429, 500, 502, 503, 504)
