"""
Azure Event Hubs Management Repository Implementation.

Repository over the async Azure management SDKs for the resources a live
test run needs: namespaces, Event Hubs and consumer groups.

Key Features:
    - Event Hub create / delete
    - Consumer group create / list
    - Namespace create / delete (long-running operations awaited to completion)
    - Namespace access key lookup
    - Resource group location lookup

One repository instance wraps one token credential. The scope manager opens
a repository per operation and closes it afterwards, so no instance outlives
the token it was built with.

Exports:
    EventHubManagementRepository: azure-mgmt-eventhub backed repository
"""

from typing import Callable, List, Optional

from azure.mgmt.eventhub.aio import EventHubManagementClient
from azure.mgmt.eventhub.models import ConsumerGroup, EHNamespace, Eventhub, Sku
from azure.mgmt.resource.resources.aio import ResourceManagementClient

from .interface_repository import IEventHubManagementRepository, NamespaceSpec
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "EventHubManagementRepository")


class EventHubManagementRepository(IEventHubManagementRepository):
    """
    Azure-backed Event Hubs management repository.

    Example:
        async with EventHubManagementRepository(credential, subscription_id) as repo:
            name = await repo.create_event_hub(rg, namespace, "abc-test", partition_count=4)
    """

    def __init__(
        self,
        credential,
        subscription_id: str,
        eventhub_client: Optional[EventHubManagementClient] = None,
        resource_client: Optional[ResourceManagementClient] = None
    ):
        if not subscription_id:
            raise ValueError("subscription_id is required for Event Hubs management")

        self.subscription_id = subscription_id
        self._credential = credential
        self._eventhub_client = eventhub_client or EventHubManagementClient(
            credential=credential,
            subscription_id=subscription_id
        )
        # Only namespace provisioning needs the resource client
        self._resource_client = resource_client

    @classmethod
    def factory(cls, subscription_id: str) -> Callable[..., "EventHubManagementRepository"]:
        """Return a callable building a repository from a credential."""
        def _create(credential) -> "EventHubManagementRepository":
            return cls(credential, subscription_id)
        return _create

    # ------------------------------------------------------------------
    # Event Hubs
    # ------------------------------------------------------------------

    async def create_event_hub(self, resource_group: str, namespace_name: str,
                               event_hub_name: str, partition_count: int) -> str:
        logger.debug(f"Creating Event Hub {namespace_name}/{event_hub_name} ({partition_count} partitions)")
        event_hub = await self._eventhub_client.event_hubs.create_or_update(
            resource_group,
            namespace_name,
            event_hub_name,
            Eventhub(partition_count=partition_count)
        )
        return event_hub.name or event_hub_name

    async def delete_event_hub(self, resource_group: str, namespace_name: str,
                               event_hub_name: str) -> None:
        logger.debug(f"Deleting Event Hub {namespace_name}/{event_hub_name}")
        await self._eventhub_client.event_hubs.delete(resource_group, namespace_name, event_hub_name)

    # ------------------------------------------------------------------
    # Consumer groups
    # ------------------------------------------------------------------

    async def create_consumer_group(self, resource_group: str, namespace_name: str,
                                    event_hub_name: str, consumer_group_name: str) -> None:
        logger.debug(f"Creating consumer group {event_hub_name}/{consumer_group_name}")
        await self._eventhub_client.consumer_groups.create_or_update(
            resource_group,
            namespace_name,
            event_hub_name,
            consumer_group_name,
            ConsumerGroup()
        )

    async def list_consumer_groups(self, resource_group: str, namespace_name: str,
                                   event_hub_name: str) -> List[str]:
        pager = self._eventhub_client.consumer_groups.list_by_event_hub(
            resource_group,
            namespace_name,
            event_hub_name
        )
        return [group.name async for group in pager]

    # ------------------------------------------------------------------
    # Namespaces
    # ------------------------------------------------------------------

    async def create_namespace(self, resource_group: str, namespace_name: str,
                               spec: NamespaceSpec) -> str:
        parameters = EHNamespace(
            location=spec.location,
            tags=dict(spec.tags),
            sku=Sku(name=spec.sku_name, tier=spec.sku_name, capacity=spec.capacity),
            is_auto_inflate_enabled=spec.auto_inflate_enabled,
            maximum_throughput_units=spec.maximum_throughput_units
        )

        logger.info(f"🏗️ Creating namespace {namespace_name} in {resource_group} ({spec.location})")
        poller = await self._eventhub_client.namespaces.begin_create_or_update(
            resource_group,
            namespace_name,
            parameters
        )
        namespace = await poller.result()
        return namespace.name or namespace_name

    async def delete_namespace(self, resource_group: str, namespace_name: str) -> None:
        logger.info(f"🗑️ Deleting namespace {namespace_name} in {resource_group}")
        poller = await self._eventhub_client.namespaces.begin_delete(resource_group, namespace_name)
        await poller.result()

    async def list_namespace_keys(self, resource_group: str, namespace_name: str,
                                  authorization_rule_name: str) -> Optional[str]:
        keys = await self._eventhub_client.namespaces.list_keys(
            resource_group,
            namespace_name,
            authorization_rule_name
        )
        return keys.primary_connection_string

    async def get_resource_group_location(self, resource_group: str) -> str:
        if self._resource_client is None:
            self._resource_client = ResourceManagementClient(
                credential=self._credential,
                subscription_id=self.subscription_id
            )
        group = await self._resource_client.resource_groups.get(resource_group)
        return group.location

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    async def close(self) -> None:
        await self._eventhub_client.close()
        if self._resource_client is not None:
            await self._resource_client.close()
