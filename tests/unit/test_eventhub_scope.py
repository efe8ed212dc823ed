"""
EventHubScopeManager tests - acquire / release against the in-memory management fakes.

Covers:
    - Name generation (uniqueness, caller tag suffix, truncation)
    - Creation path (one Event Hub create, concurrent consumer group fan-out)
    - Bind path (existing Event Hub, no create or delete calls)
    - Release (idempotent, swallows failures, always disposes)
    - Argument contracts
"""

import asyncio
import logging

import pytest
from azure.core.exceptions import ClientAuthenticationError, HttpResponseError

from config.defaults import EventHubDefaults
from exceptions import ContractViolationError
from services import (
    EventHubScopeManager,
    LiveResourceManager,
    generate_event_hub_name,
    truncate_caller_tag,
)
from tests.factories.management_fakes import TEST_NAMESPACE, TEST_RESOURCE_GROUP, FakeTokenProvider, http_error


@pytest.fixture
def bound_manager(make_config, make_resource_manager, azure_state):
    """Scope manager configured to bind to an existing Event Hub."""
    azure_state.add_existing_event_hub("shared-hub", ["reader-a", "reader-b"])
    resources = make_resource_manager(make_config(event_hub_name="shared-hub"))
    return EventHubScopeManager(resources, TEST_NAMESPACE)


class TestNameGeneration:

    def test_short_tag_kept(self):
        assert truncate_caller_tag("test_send") == "test_send"

    def test_long_tag_truncated(self):
        assert truncate_caller_tag("test_receive_batch_with_checkpoint") == "test_receive_ba"
        assert len(truncate_caller_tag("x" * 100)) == EventHubDefaults.CALLER_TAG_MAX_LENGTH

    @pytest.mark.parametrize("caller_tag,expected", [
        ("test_receive_a_b", "test_receive_a"),
        ("test_send-batch.x", "test_send-batch"),
        ("abcdefghijklmn__tail", "abcdefghijklmn"),
    ])
    def test_trailing_separator_dropped_after_cut(self, caller_tag, expected):
        assert truncate_caller_tag(caller_tag) == expected
        assert generate_event_hub_name(caller_tag).endswith(f"-{expected}")

    def test_tag_without_alphanumerics_leaves_random_part(self):
        name = generate_event_hub_name("___")
        assert len(name) == EventHubDefaults.RANDOM_PREFIX_LENGTH
        assert name[-1].isalnum()

    def test_name_ends_with_truncated_tag(self):
        name = generate_event_hub_name("test_receive_batch_with_checkpoint")
        assert name.endswith("-test_receive_ba")
        assert len(name) == EventHubDefaults.RANDOM_PREFIX_LENGTH + 1 + EventHubDefaults.CALLER_TAG_MAX_LENGTH
        assert len(name) <= EventHubDefaults.NAME_MAX_LENGTH

    def test_names_unique_for_same_tag(self):
        names = {generate_event_hub_name("test_send") for _ in range(50)}
        assert len(names) == 50


class TestAcquireCreatesEventHub:

    @pytest.mark.asyncio
    async def test_created_scope(self, scope_manager, azure_state):
        scope = await scope_manager.acquire(4, caller_tag="test_send")

        assert scope.was_created is True
        assert scope.disposed is False
        assert scope.consumer_groups == ()
        assert scope.event_hub_name.endswith("-test_send")
        assert azure_state.calls_to("create_event_hub") == [
            (TEST_RESOURCE_GROUP, TEST_NAMESPACE, scope.event_hub_name, 4)
        ]
        assert azure_state.event_hubs[scope.event_hub_name]["partition_count"] == 4

    @pytest.mark.asyncio
    async def test_repeated_acquire_gives_unique_names(self, scope_manager):
        first = await scope_manager.acquire(1, caller_tag="test_send")
        second = await scope_manager.acquire(1, caller_tag="test_send")
        assert first.event_hub_name != second.event_hub_name

    @pytest.mark.asyncio
    async def test_long_caller_tag_truncated_in_name(self, scope_manager):
        scope = await scope_manager.acquire(1, caller_tag="test_receive_batch_with_checkpoint")
        assert scope.event_hub_name.endswith("-test_receive_ba")
        assert "checkpoint" not in scope.event_hub_name

    @pytest.mark.asyncio
    async def test_consumer_groups_created(self, scope_manager, azure_state):
        scope = await scope_manager.acquire(2, ["g1", "g2"], caller_tag="test_groups")

        assert azure_state.count("create_event_hub") == 1
        assert azure_state.count("create_consumer_group") == 2
        assert scope.consumer_groups == ("g1", "g2")
        assert sorted(azure_state.event_hubs[scope.event_hub_name]["consumer_groups"]) == ["g1", "g2"]

    @pytest.mark.asyncio
    async def test_waits_for_slow_consumer_group(self, scope_manager, azure_state):
        azure_state.delay("create_consumer_group:g1", 0.05)

        scope = await scope_manager.acquire(2, ["g1", "g2"], caller_tag="test_groups")

        # Both completed before acquire returned; g2 finished first, so the calls overlapped
        assert azure_state.event_hubs[scope.event_hub_name]["consumer_groups"] == ["g2", "g1"]

    @pytest.mark.asyncio
    async def test_duplicate_consumer_groups_created_once(self, scope_manager, azure_state):
        scope = await scope_manager.acquire(2, ["g1", "g1", "g2"], caller_tag="test_groups")
        assert azure_state.count("create_consumer_group") == 2
        assert scope.consumer_groups == ("g1", "g2")

    @pytest.mark.asyncio
    async def test_transient_create_failure_retried_with_new_name(self, scope_manager, azure_state):
        azure_state.fail("create_event_hub", http_error(409))

        scope = await scope_manager.acquire(1, caller_tag="test_retry")

        attempted = [args[2] for args in azure_state.calls_to("create_event_hub")]
        assert len(attempted) == 2
        assert attempted[0] != attempted[1]
        assert scope.event_hub_name == attempted[1]

    @pytest.mark.asyncio
    async def test_consumer_group_failure_fails_acquire(self, scope_manager, azure_state):
        azure_state.fail_always("create_consumer_group", http_error(400))

        with pytest.raises(HttpResponseError):
            await scope_manager.acquire(2, ["g1", "g2"], caller_tag="test_groups")

        assert azure_state.count("create_event_hub") == 1
        assert azure_state.count("delete_event_hub") == 0

    @pytest.mark.asyncio
    async def test_transient_consumer_group_failure_retried(self, scope_manager, azure_state):
        azure_state.fail("create_consumer_group", http_error(429))

        scope = await scope_manager.acquire(2, ["g1", "g2"], caller_tag="test_groups")

        assert azure_state.count("create_consumer_group") == 3
        assert sorted(azure_state.event_hubs[scope.event_hub_name]["consumer_groups"]) == ["g1", "g2"]

    @pytest.mark.asyncio
    async def test_create_failure_propagates_unchanged(self, scope_manager, azure_state):
        error = http_error(403)
        azure_state.fail_always("create_event_hub", error)

        with pytest.raises(HttpResponseError) as exc_info:
            await scope_manager.acquire(1, caller_tag="test_denied")
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_token_per_operation_and_clients_closed(self, scope_manager, azure_state, token_provider):
        scope = await scope_manager.acquire(1, caller_tag="test_tokens")
        await scope.release()

        assert token_provider.acquired == 2
        assert azure_state.clients_opened == 2
        assert azure_state.clients_closed == 2


class TestAcquireBindsExistingEventHub:

    @pytest.mark.asyncio
    async def test_bind_ignores_requested_shape(self, bound_manager, azure_state):
        scope = await bound_manager.acquire(8, ["ignored"], caller_tag="test_bind")

        assert scope.was_created is False
        assert scope.event_hub_name == "shared-hub"
        assert scope.consumer_groups == ("$Default", "reader-a", "reader-b")
        assert azure_state.count("create_event_hub") == 0
        assert azure_state.count("create_consumer_group") == 0

    @pytest.mark.asyncio
    async def test_release_of_bound_scope_is_local(self, bound_manager, azure_state, token_provider):
        scope = await bound_manager.acquire(1, caller_tag="test_bind")
        acquired_before = token_provider.acquired

        await scope.release()

        assert scope.disposed is True
        assert azure_state.count("delete_event_hub") == 0
        assert token_provider.acquired == acquired_before
        assert "shared-hub" in azure_state.event_hubs

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self, bound_manager, azure_state):
        azure_state.fail_always("list_consumer_groups", http_error(404))
        with pytest.raises(HttpResponseError):
            await bound_manager.acquire(1, caller_tag="test_bind")


class TestRelease:

    @pytest.mark.asyncio
    async def test_release_deletes_event_hub(self, scope_manager, azure_state):
        scope = await scope_manager.acquire(1, caller_tag="test_release")

        await scope_manager.release(scope)

        assert scope.disposed is True
        assert azure_state.calls_to("delete_event_hub") == [
            (TEST_RESOURCE_GROUP, TEST_NAMESPACE, scope.event_hub_name)
        ]
        assert scope.event_hub_name not in azure_state.event_hubs

    @pytest.mark.asyncio
    async def test_release_twice_deletes_once(self, scope_manager, azure_state):
        scope = await scope_manager.acquire(1, caller_tag="test_release")

        await scope.release()
        await scope.release()

        assert azure_state.count("delete_event_hub") == 1

    @pytest.mark.asyncio
    async def test_concurrent_release_deletes_once(self, scope_manager, azure_state):
        azure_state.delay("delete_event_hub", 0.02)
        scope = await scope_manager.acquire(1, caller_tag="test_release")

        await asyncio.gather(scope.release(), scope.release(), scope_manager.release(scope))

        assert azure_state.count("delete_event_hub") == 1
        assert scope.disposed is True

    @pytest.mark.asyncio
    async def test_delete_failure_swallowed_and_logged(self, scope_manager, azure_state, caplog):
        azure_state.fail_always("delete_event_hub", http_error(403))
        scope = await scope_manager.acquire(1, caller_tag="test_release")

        with caplog.at_level(logging.WARNING):
            await scope.release()

        assert scope.disposed is True
        assert azure_state.count("delete_event_hub") == 1
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING and scope.event_hub_name in r.getMessage()]
        assert warnings
        assert warnings[0].custom_dimensions["exception_type"] == "HttpResponseError"

    @pytest.mark.asyncio
    async def test_transient_delete_failure_retried(self, scope_manager, azure_state):
        azure_state.fail("delete_event_hub", http_error(409))
        scope = await scope_manager.acquire(1, caller_tag="test_release")

        await scope.release()

        assert azure_state.count("delete_event_hub") == 2
        assert scope.event_hub_name not in azure_state.event_hubs

    @pytest.mark.asyncio
    async def test_exhausted_retries_swallowed(self, scope_manager, azure_state):
        azure_state.fail_always("delete_event_hub", http_error(503))
        scope = await scope_manager.acquire(1, caller_tag="test_release")

        await scope.release()

        assert azure_state.count("delete_event_hub") == 3
        assert scope.disposed is True
        await scope.release()
        assert azure_state.count("delete_event_hub") == 3

    @pytest.mark.asyncio
    async def test_token_failure_swallowed(self, config, client_factory, retry_policy_factory, azure_state):
        token_provider = FakeTokenProvider()
        resources = LiveResourceManager(config, token_provider, client_factory, retry_policy_factory)
        manager = EventHubScopeManager(resources, TEST_NAMESPACE)
        scope = await manager.acquire(1, caller_tag="test_release")

        token_provider.error = ClientAuthenticationError("token expired")
        await scope.release()

        assert scope.disposed is True
        assert azure_state.count("delete_event_hub") == 0


class TestScopeContextManagers:

    @pytest.mark.asyncio
    async def test_scope_releases_on_exit(self, scope_manager, azure_state):
        async with scope_manager.scope(2, ["g1"], caller_tag="test_ctx") as scope:
            assert scope.event_hub_name in azure_state.event_hubs
        assert scope.disposed is True
        assert scope.event_hub_name not in azure_state.event_hubs

    @pytest.mark.asyncio
    async def test_scope_releases_when_body_raises(self, scope_manager, azure_state):
        with pytest.raises(RuntimeError, match="test body failed"):
            async with scope_manager.scope(1, caller_tag="test_ctx") as scope:
                raise RuntimeError("test body failed")
        assert scope.disposed is True
        assert azure_state.count("delete_event_hub") == 1

    @pytest.mark.asyncio
    async def test_acquired_scope_is_async_context_manager(self, scope_manager, azure_state):
        async with await scope_manager.acquire(1, caller_tag="test_ctx") as scope:
            pass
        assert scope.disposed is True
        assert azure_state.count("delete_event_hub") == 1

    @pytest.mark.asyncio
    async def test_repr_shows_name_and_state(self, scope_manager):
        scope = await scope_manager.acquire(1, ["g1"], caller_tag="test_repr")
        assert scope.event_hub_name in repr(scope)
        assert "disposed=False" in repr(scope)


class TestAcquireContracts:

    @pytest.mark.asyncio
    async def test_caller_tag_is_required(self, scope_manager):
        with pytest.raises(TypeError):
            await scope_manager.acquire(1)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("partition_count", [0, -3])
    async def test_non_positive_partition_count(self, scope_manager, azure_state, partition_count):
        with pytest.raises(ValueError):
            await scope_manager.acquire(partition_count, caller_tag="test_bad")
        assert azure_state.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("partition_count", [True, "4", 2.0, None])
    async def test_partition_count_type(self, scope_manager, partition_count):
        with pytest.raises(ContractViolationError):
            await scope_manager.acquire(partition_count, caller_tag="test_bad")

    @pytest.mark.asyncio
    async def test_caller_tag_type(self, scope_manager):
        with pytest.raises(ContractViolationError):
            await scope_manager.acquire(1, caller_tag=None)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("caller_tag", ["", "   "])
    async def test_blank_caller_tag(self, scope_manager, caller_tag):
        with pytest.raises(ValueError):
            await scope_manager.acquire(1, caller_tag=caller_tag)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("groups", [[""], ["g1", 7], "g1"])
    async def test_invalid_consumer_group_names(self, scope_manager, azure_state, groups):
        with pytest.raises(ContractViolationError):
            await scope_manager.acquire(1, groups, caller_tag="test_bad")
        assert azure_state.calls == []

    def test_contract_violation_is_type_error(self):
        assert issubclass(ContractViolationError, TypeError)

    def test_namespace_name_required(self, resource_manager):
        with pytest.raises(ValueError):
            EventHubScopeManager(resource_manager, "")
