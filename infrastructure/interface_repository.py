"""
Repository Abstract Base Classes - Single Point of Truth.

Enforces exact method signatures for the Event Hubs management repository
so the scope manager, the Azure-backed implementation and the in-memory
test fake cannot drift apart.

Philosophy: "Define once, enforce everywhere"

Exports:
    NamespaceSpec: Shape of a namespace to provision
    IEventHubManagementRepository: Management API interface
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class NamespaceSpec:
    """Parameters for namespace creation."""
    location: str
    sku_name: str
    capacity: int
    auto_inflate_enabled: bool
    maximum_throughput_units: int
    tags: Dict[str, str] = field(default_factory=dict)


class IEventHubManagementRepository(ABC):
    """
    Event Hubs management operations used by live test scopes.

    One instance wraps one authenticated client; callers open it for a
    single operation and close it afterwards.
    """

    # ------------------------------------------------------------------
    # Event Hubs (primary resource)
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_event_hub(self, resource_group: str, namespace_name: str,
                               event_hub_name: str, partition_count: int) -> str:
        """Create or update an Event Hub. Returns the name reported by the service."""
        pass

    @abstractmethod
    async def delete_event_hub(self, resource_group: str, namespace_name: str,
                               event_hub_name: str) -> None:
        """Delete an Event Hub together with its consumer groups."""
        pass

    # ------------------------------------------------------------------
    # Consumer groups (sub-resources)
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_consumer_group(self, resource_group: str, namespace_name: str,
                                    event_hub_name: str, consumer_group_name: str) -> None:
        pass

    @abstractmethod
    async def list_consumer_groups(self, resource_group: str, namespace_name: str,
                                   event_hub_name: str) -> List[str]:
        """Names of all consumer groups, including $Default."""
        pass

    # ------------------------------------------------------------------
    # Namespaces (container)
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_namespace(self, resource_group: str, namespace_name: str,
                               spec: NamespaceSpec) -> str:
        """Create a namespace and wait for provisioning. Returns its name."""
        pass

    @abstractmethod
    async def delete_namespace(self, resource_group: str, namespace_name: str) -> None:
        """Delete a namespace and wait for completion."""
        pass

    @abstractmethod
    async def list_namespace_keys(self, resource_group: str, namespace_name: str,
                                  authorization_rule_name: str) -> Optional[str]:
        """Primary connection string of an authorization rule."""
        pass

    @abstractmethod
    async def get_resource_group_location(self, resource_group: str) -> str:
        pass

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    @abstractmethod
    async def close(self) -> None:
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()
