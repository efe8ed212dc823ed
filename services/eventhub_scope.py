"""
Event Hub Scope - per-test Event Hub lifetime.

Provides a dynamically created Event Hub that exists only for the lifetime
of a scope; releasing the scope removes it. When the environment names an
existing Event Hub, the scope binds to it instead and releasing is a no-op,
so test code never needs to know which of the two happened.

Lifecycle:
    scope = await manager.acquire(4, ["reader-a"], caller_tag="test_receive")
    try:
        ...  # use scope.event_hub_name / scope.consumer_groups
    finally:
        await scope.release()

    # or, equivalently
    async with manager.scope(4, ["reader-a"], caller_tag="test_receive") as scope:
        ...

Release contract:
    - At most one delete call per scope, however many times release() runs
    - Never raises (cancellation aside); failures are logged at WARNING
    - Bound scopes never issue a delete call

Exports:
    EventHubScope: Handle for one acquired Event Hub
    EventHubScopeManager: acquire / release operations for one namespace
    truncate_caller_tag: Caller tag truncation
    generate_event_hub_name: Unique Event Hub name for a caller tag
"""

import asyncio
import functools
import re
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, List, Optional, Tuple

from config.defaults import EventHubDefaults
from exceptions import ContractViolationError
from util_logger import LoggerFactory, ComponentType

from .resource_manager import LiveResourceManager

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "EventHubScopeManager")


_TRAILING_NON_ALNUM = re.compile(r"[^A-Za-z0-9]+$")


def truncate_caller_tag(caller_tag: str) -> str:
    """
    Cut a caller tag down to CALLER_TAG_MAX_LENGTH characters.

    Trailing non-alphanumerics left by the cut are dropped; Event Hub names
    must end in a letter or digit.

    Example:
        truncate_caller_tag("test_receive_a_b") -> "test_receive_a"
    """
    truncated = caller_tag[:EventHubDefaults.CALLER_TAG_MAX_LENGTH]
    return _TRAILING_NON_ALNUM.sub("", truncated)


def generate_event_hub_name(caller_tag: str) -> str:
    """
    Unique Event Hub name ending in the (truncated) caller tag.

    Example:
        generate_event_hub_name("test_receive_batch") -> "1f0c9a3e-52b1-test_receive_ba"
    """
    random_part = str(uuid.uuid4())[:EventHubDefaults.RANDOM_PREFIX_LENGTH]
    tag = truncate_caller_tag(caller_tag)
    name = f"{random_part}-{tag}" if tag else random_part
    return name[:EventHubDefaults.NAME_MAX_LENGTH]


class EventHubScope:
    """
    An Event Hub acquired for one test.

    Read-only attributes:
        event_hub_name: Name of the Event Hub
        was_created: True if the scope created the Event Hub, False if it bound
            to one named by the environment
        consumer_groups: Consumer groups created with the Event Hub (the
            implicit $Default is not included), or the groups listed on an
            existing Event Hub
    """

    def __init__(self, manager: "EventHubScopeManager", event_hub_name: str,
                 consumer_groups: Iterable[str], was_created: bool):
        self._manager = manager
        self._event_hub_name = event_hub_name
        self._consumer_groups: Tuple[str, ...] = tuple(consumer_groups)
        self._was_created = was_created
        self._disposed = False
        self._release_lock = asyncio.Lock()

    @property
    def event_hub_name(self) -> str:
        return self._event_hub_name

    @property
    def was_created(self) -> bool:
        return self._was_created

    @property
    def consumer_groups(self) -> Tuple[str, ...]:
        return self._consumer_groups

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def release(self) -> None:
        """Release through the owning manager. Safe to call more than once."""
        await self._manager.release(self)

    async def __aenter__(self) -> "EventHubScope":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.release()

    def __repr__(self) -> str:
        return (
            f"EventHubScope(event_hub_name={self._event_hub_name!r}, "
            f"was_created={self._was_created}, consumer_groups={list(self._consumer_groups)!r}, "
            f"disposed={self._disposed})"
        )


class EventHubScopeManager:
    """
    Acquires and releases Event Hub scopes inside one namespace.

    Args:
        resource_manager: The session's shared LiveResourceManager
        namespace_name: Namespace holding the Event Hubs
    """

    def __init__(self, resource_manager: LiveResourceManager, namespace_name: str):
        if not namespace_name:
            raise ValueError("namespace_name is required")
        self._resources = resource_manager
        self.namespace_name = namespace_name

    @property
    def resource_group(self) -> str:
        return self._resources.resource_group

    # ------------------------------------------------------------------
    # Acquire
    # ------------------------------------------------------------------

    async def acquire(self, partition_count: int, consumer_groups: Optional[Iterable[str]] = None,
                      *, caller_tag: str) -> EventHubScope:
        """
        Get or create an Event Hub for the calling test.

        If EVENTHUBS_EVENT_HUB_NAME is configured the scope binds to that
        Event Hub and `partition_count` / `consumer_groups` are ignored.
        Otherwise a new Event Hub named "<random>-<caller_tag>" is created
        with `partition_count` partitions, and every requested consumer group
        is created concurrently.

        Args:
            partition_count: Partitions for a new Event Hub (> 0)
            consumer_groups: Consumer groups to create; do not include $Default
            caller_tag: Identifies the calling test; truncated to 15 characters

        Returns:
            EventHubScope ready for use.

        Raises:
            ContractViolationError: Wrong argument types.
            ValueError: partition_count <= 0 or empty caller_tag.
            azure.core.exceptions.AzureError: Any management failure after retries.
        """
        if isinstance(partition_count, bool) or not isinstance(partition_count, int):
            raise ContractViolationError(
                f"partition_count must be int, got {type(partition_count).__name__}"
            )
        if partition_count <= 0:
            raise ValueError(f"partition_count must be greater than zero, got {partition_count}")
        if not isinstance(caller_tag, str):
            raise ContractViolationError(f"caller_tag must be str, got {type(caller_tag).__name__}")
        if not caller_tag.strip():
            raise ValueError("caller_tag must not be empty")

        if isinstance(consumer_groups, str):
            raise ContractViolationError(
                f"consumer_groups must be an iterable of names, not a single str ({consumer_groups!r})"
            )
        groups = list(dict.fromkeys(consumer_groups or ()))
        for group in groups:
            if not isinstance(group, str) or not group:
                raise ContractViolationError(f"consumer group names must be non-empty str, got {group!r}")

        event_hub_name = self._resources.config.event_hub_name
        if event_hub_name:
            return await self._bind_existing(event_hub_name)

        return await self._create_new(partition_count, groups, truncate_caller_tag(caller_tag))

    async def _bind_existing(self, event_hub_name: str) -> EventHubScope:
        resource_group = self.resource_group
        namespace_name = self.namespace_name

        async with self._resources.open_client() as client:
            groups = await self._resources.create_retry_policy().execute(
                lambda: client.list_consumer_groups(resource_group, namespace_name, event_hub_name),
                operation_name=f"list_consumer_groups({event_hub_name})"
            )

        logger.info(f"🔗 Bound to existing Event Hub {namespace_name}/{event_hub_name} ({len(groups)} consumer groups)")
        return EventHubScope(self, event_hub_name, groups, was_created=False)

    async def _create_new(self, partition_count: int, groups: List[str], caller_tag: str) -> EventHubScope:
        resource_group = self.resource_group
        namespace_name = self.namespace_name

        async with self._resources.open_client() as client:
            # New name per attempt, same as namespace creation
            event_hub_name = await self._resources.create_retry_policy().execute(
                lambda: client.create_event_hub(
                    resource_group, namespace_name, generate_event_hub_name(caller_tag), partition_count
                ),
                operation_name=f"create_event_hub({caller_tag})"
            )
            logger.info(f"✅ Event Hub created: {namespace_name}/{event_hub_name} ({partition_count} partitions)")

            if groups:
                consumer_policy = self._resources.create_retry_policy()
                results = await asyncio.gather(
                    *(
                        consumer_policy.execute(
                            functools.partial(
                                client.create_consumer_group,
                                resource_group, namespace_name, event_hub_name, group
                            ),
                            operation_name=f"create_consumer_group({event_hub_name}/{group})"
                        )
                        for group in groups
                    ),
                    return_exceptions=True
                )

                failures = [r for r in results if isinstance(r, BaseException)]
                if failures:
                    # Orphaned Event Hub is removed with the namespace at the end of the run
                    logger.error(
                        f"❌ {len(failures)}/{len(groups)} consumer groups failed for {event_hub_name}"
                    )
                    raise failures[0]

        return EventHubScope(self, event_hub_name, groups, was_created=True)

    @asynccontextmanager
    async def scope(self, partition_count: int, consumer_groups: Optional[Iterable[str]] = None,
                    *, caller_tag: str) -> AsyncIterator[EventHubScope]:
        """acquire() on entry, release() on exit."""
        acquired = await self.acquire(partition_count, consumer_groups, caller_tag=caller_tag)
        try:
            yield acquired
        finally:
            await self.release(acquired)

    # ------------------------------------------------------------------
    # Release
    # ------------------------------------------------------------------

    async def release(self, scope: EventHubScope) -> None:
        """
        Delete the scope's Event Hub if the scope created it.

        Best-effort: any failure is logged and swallowed. Some management
        operations are rejected by ARM under load, and a failed delete must
        not mark the test itself as failed. Deleting the namespace at the end
        of the run removes any Event Hub left behind.

        Note: this also swallows non-transient failures such as authorization
        errors, which can hide a misconfigured identity. Check the WARNING
        logs when Event Hubs accumulate in a shared namespace.
        """
        async with scope._release_lock:
            if scope._disposed or not scope.was_created:
                scope._disposed = True
                return

            resource_group = self.resource_group
            namespace_name = self.namespace_name
            event_hub_name = scope.event_hub_name

            try:
                async with self._resources.open_client() as client:
                    await self._resources.create_retry_policy().execute(
                        lambda: client.delete_event_hub(resource_group, namespace_name, event_hub_name),
                        operation_name=f"delete_event_hub({event_hub_name})"
                    )
                logger.info(f"🗑️ Event Hub deleted: {namespace_name}/{event_hub_name}")
            except Exception as e:
                logger.warning(
                    f"⚠️ Event Hub {namespace_name}/{event_hub_name} was not deleted "
                    f"({type(e).__name__}: {e}); namespace cleanup will remove it",
                    extra={'custom_dimensions': {
                        'event_hub_name': event_hub_name,
                        'namespace': namespace_name,
                        'exception_type': type(e).__name__,
                    }}
                )
            finally:
                scope._disposed = True
