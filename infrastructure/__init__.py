"""
Infrastructure Package - Lazy Loading Implementation.

Azure-facing building blocks for live test resources. Imports are deferred
until a name is first accessed so that importing the package (for example
from a pytest conftest) never pulls in the Azure SDKs or reads the
environment before the session is ready to use them.

Exports:
    EventHubManagementRepository: azure-mgmt-eventhub backed repository
    IEventHubManagementRepository: Management API interface
    NamespaceSpec: Namespace creation parameters
    RetryPolicy / create_retry_policy: Management operation retries
    ManagementTokenProvider / StaticTokenCredential: Authentication
    parse_connection_string_token / parse_namespace_name: Connection string parsing
"""


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "EventHubManagementRepository":
        from .eventhub_management import EventHubManagementRepository
        return EventHubManagementRepository

    elif name in ("IEventHubManagementRepository", "NamespaceSpec"):
        from . import interface_repository
        return getattr(interface_repository, name)

    elif name in ("RetryPolicy", "create_retry_policy", "is_transient_error"):
        from . import retry
        return getattr(retry, name)

    elif name in ("ManagementTokenProvider", "StaticTokenCredential", "create_azure_credential"):
        from . import auth
        return getattr(auth, name)

    elif name in ("parse_connection_string_token", "parse_namespace_name"):
        from . import connection_string
        return getattr(connection_string, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "EventHubManagementRepository",
    "IEventHubManagementRepository",
    "NamespaceSpec",
    "RetryPolicy",
    "create_retry_policy",
    "is_transient_error",
    "ManagementTokenProvider",
    "StaticTokenCredential",
    "create_azure_credential",
    "parse_connection_string_token",
    "parse_namespace_name",
]
