# ============================================================================
# LIVE RESOURCE MANAGER
# ============================================================================
# STATUS: Service - Shared collaborator for live test resource operations
# PURPOSE: Token-per-operation management clients, retry policies and the
#          session-level namespace create / delete operations
# LAST_REVIEWED: 16 OCT 2026
# ============================================================================
"""
Live Resource Manager.

One instance per test session, owned by the session orchestrator and passed
explicitly to every EventHubScopeManager. There is no module-level instance.

Responsibilities:
    - open_client(): fetch a token, build a management repository, close it after use
    - create_retry_policy(): fresh RetryPolicy per operation
    - create_namespace(): provision the per-run namespace
    - delete_namespace(): remove it at session end (failures propagate)

Exports:
    LiveResourceManager: Shared collaborator instance
    generate_resource_tags: Tags applied to provisioned namespaces
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import AsyncIterator, Callable, Dict, Optional

from config import EventHubsTestConfig
from exceptions import ResourceProvisioningError
from infrastructure.auth import StaticTokenCredential
from infrastructure.interface_repository import IEventHubManagementRepository, NamespaceSpec
from infrastructure.retry import RetryPolicy, create_retry_policy
from util_logger import LoggerFactory, ComponentType, log_exceptions

from .namespace import NamespaceProperties, generate_namespace_name

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "LiveResourceManager")

ClientFactory = Callable[[StaticTokenCredential], IEventHubManagementRepository]


def generate_resource_tags(lifetime_hours: int, now: Optional[datetime] = None) -> Dict[str, str]:
    """
    Tags marking a resource as safe to delete after `lifetime_hours`.

    Lets a subscription-wide cleanup job remove namespaces whose session
    died before it could delete them.
    """
    now = now or datetime.now(timezone.utc)
    delete_after = now + timedelta(hours=lifetime_hours)
    return {"DeleteAfter": delete_after.isoformat(timespec="seconds")}


class LiveResourceManager:
    """
    Shared collaborator for management operations of a test session.

    Args:
        config: Session configuration
        token_provider: Object with `async acquire_token() -> AccessToken`
        client_factory: Builds a management repository from a token credential
        retry_policy_factory: Zero-argument callable returning a RetryPolicy;
            defaults to create_retry_policy(config)
    """

    def __init__(
        self,
        config: EventHubsTestConfig,
        token_provider,
        client_factory: ClientFactory,
        retry_policy_factory: Optional[Callable[[], RetryPolicy]] = None
    ):
        self.config = config
        self._token_provider = token_provider
        self._client_factory = client_factory
        self._retry_policy_factory = retry_policy_factory or (lambda: create_retry_policy(config))

    @property
    def resource_group(self) -> str:
        return self.config.resource_group

    def create_retry_policy(self) -> RetryPolicy:
        return self._retry_policy_factory()

    @asynccontextmanager
    async def open_client(self) -> AsyncIterator[IEventHubManagementRepository]:
        """
        Management repository authenticated with a freshly acquired token.

        The repository is closed on exit whether or not the body raised.
        """
        token = await self._token_provider.acquire_token()
        client = self._client_factory(StaticTokenCredential(token))
        try:
            yield client
        finally:
            await client.close()

    # ------------------------------------------------------------------
    # Namespace lifecycle (session-level)
    # ------------------------------------------------------------------

    async def create_namespace(self) -> NamespaceProperties:
        """
        Provision a namespace to contain the Event Hubs of one test run.

        Returns:
            NamespaceProperties with was_created=True.

        Raises:
            ResourceProvisioningError: Namespace created but no connection string returned.
                The namespace is deleted (best-effort) before the error is raised.
            azure.core.exceptions.AzureError: Any management failure after retries.
        """
        config = self.config
        resource_group = config.resource_group
        policy = self.create_retry_policy()

        async with self.open_client() as client:
            location = await policy.execute(
                lambda: client.get_resource_group_location(resource_group),
                operation_name=f"get_resource_group_location({resource_group})"
            )

            spec = NamespaceSpec(
                location=location,
                sku_name=config.namespace_sku,
                capacity=config.namespace_capacity,
                auto_inflate_enabled=config.auto_inflate_enabled,
                maximum_throughput_units=config.maximum_throughput_units,
                tags=generate_resource_tags(config.resource_lifetime_hours)
            )

            # A new name per attempt; a half-provisioned namespace from a
            # failed attempt must not collide with the retry
            namespace_name = await policy.execute(
                lambda: client.create_namespace(resource_group, generate_namespace_name(), spec),
                operation_name="create_namespace"
            )

            try:
                connection_string = await policy.execute(
                    lambda: client.list_namespace_keys(
                        resource_group, namespace_name, config.shared_access_key_name
                    ),
                    operation_name=f"list_namespace_keys({namespace_name})"
                )
                if not connection_string:
                    raise ResourceProvisioningError(
                        f"Namespace '{namespace_name}' has no connection string for "
                        f"authorization rule '{config.shared_access_key_name}'"
                    )
            except Exception:
                # No handle reaches the session, so the namespace is removed here
                await self._discard_namespace(client, namespace_name)
                raise

        logger.info(f"✅ Namespace provisioned: {namespace_name} ({location})")
        return NamespaceProperties(name=namespace_name, connection_string=connection_string, was_created=True)

    async def _discard_namespace(self, client: IEventHubManagementRepository, namespace_name: str) -> None:
        """Best-effort delete of a namespace that could not be handed to the session."""
        resource_group = self.config.resource_group
        try:
            await self.create_retry_policy().execute(
                lambda: client.delete_namespace(resource_group, namespace_name),
                operation_name=f"delete_namespace({namespace_name})"
            )
            logger.warning(f"🗑️ Namespace {namespace_name} deleted after failed provisioning")
        except Exception as e:
            logger.error(
                f"❌ Namespace {namespace_name} was not deleted after failed provisioning "
                f"({type(e).__name__}: {e}); remove it manually or wait for DeleteAfter cleanup",
                extra={'custom_dimensions': {
                    'namespace': namespace_name,
                    'exception_type': type(e).__name__,
                }}
            )

    @log_exceptions(ComponentType.SERVICE, "LiveResourceManager")
    async def delete_namespace(self, namespace_name: str) -> None:
        """
        Remove a namespace used as a container for a test run.

        Runs once at session end; failures propagate because nothing
        downstream would clean up after it.
        """
        resource_group = self.config.resource_group
        async with self.open_client() as client:
            await self.create_retry_policy().execute(
                lambda: client.delete_namespace(resource_group, namespace_name),
                operation_name=f"delete_namespace({namespace_name})"
            )
        logger.info(f"🗑️ Namespace deleted: {namespace_name}")
