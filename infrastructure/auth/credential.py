# ============================================================================
# AZURE MANAGEMENT CREDENTIALS
# ============================================================================
# STATUS: Infrastructure - Canonical credential provider
# PURPOSE: Management token acquisition for live test resource operations
# DEPENDENCIES: azure.identity, azure.core (no infrastructure dependencies)
# ============================================================================
"""
Azure management credentials.

Every management operation (create, delete, list) fetches a fresh token
from ManagementTokenProvider and builds its client around a
StaticTokenCredential holding that token. Tokens are never cached across
operations: a run can outlive a token, and a namespace deletion at the end
of a long run must not fail on an expired token.

Authentication Flow:
-------------------
1. Session creates one DefaultAzureCredential (env vars, managed identity, az login)
2. ManagementTokenProvider.acquire_token() → AccessToken for the ARM scope
3. StaticTokenCredential(token) handed to the management client
4. Client closed when the operation completes

Usage:
------
```python
credential = create_azure_credential()
provider = ManagementTokenProvider(credential)

token = await provider.acquire_token()
client = EventHubManagementClient(StaticTokenCredential(token), subscription_id)
```
"""

from typing import Optional

from azure.core.credentials import AccessToken
from azure.identity.aio import DefaultAzureCredential

from config.defaults import AzureDefaults
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "ManagementTokenProvider")


def create_azure_credential() -> DefaultAzureCredential:
    """
    Create the async DefaultAzureCredential used by a test session.

    The caller owns the credential and must close it.
    """
    logger.info("🔐 Creating DefaultAzureCredential for management operations")
    return DefaultAzureCredential()


class ManagementTokenProvider:
    """
    Acquires Azure Resource Manager tokens.

    Safe for concurrent use; each call goes to the underlying credential,
    which handles its own caching and refresh.
    """

    def __init__(self, credential, scope: str = AzureDefaults.MANAGEMENT_SCOPE):
        self._credential = credential
        self._scope = scope

    @property
    def scope(self) -> str:
        return self._scope

    async def acquire_token(self) -> AccessToken:
        """
        Get a management token.

        Returns:
            AccessToken for the configured scope.

        Raises:
            azure.core.exceptions.ClientAuthenticationError: If no credential
                in the chain can produce a token.
        """
        token = await self._credential.get_token(self._scope)
        logger.debug(f"Management token acquired, expires_on: {token.expires_on}")
        return token

    async def close(self) -> None:
        await self._credential.close()


class StaticTokenCredential:
    """
    Async token credential that always returns one pre-fetched token.

    Satisfies the AsyncTokenCredential protocol expected by the azure-mgmt
    async clients.
    """

    def __init__(self, token: AccessToken):
        self._token = token

    async def get_token(self, *scopes: str, claims: Optional[str] = None,
                        tenant_id: Optional[str] = None, **kwargs) -> AccessToken:
        return self._token

    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()


__all__ = ["create_azure_credential", "ManagementTokenProvider", "StaticTokenCredential"]
