"""
Authentication for Azure management operations.

Exports:
    create_azure_credential: Session-owned DefaultAzureCredential
    ManagementTokenProvider: Per-operation ARM token acquisition
    StaticTokenCredential: Credential wrapper around one token
"""

from .credential import create_azure_credential, ManagementTokenProvider, StaticTokenCredential

__all__ = [
    "create_azure_credential",
    "ManagementTokenProvider",
    "StaticTokenCredential",
]
