"""
Live Event Hubs test session.

Orchestrates the resources of one test run:

    Session start
        ├── validate environment (when configuration comes from the environment)
        ├── namespace: parse EVENTHUBS_NAMESPACE_CONNECTION_STRING, or provision one
        └── build the shared LiveResourceManager and the EventHubScopeManager
    Tests
        └── scope_manager.acquire(...) / release(...) per test
    Session end
        ├── delete the namespace if this session created it (failures propagate)
        └── close the credential if this session created it

Usage (pytest):
    @pytest_asyncio.fixture(scope="session", loop_scope="session")
    async def eventhubs_session():
        async with LiveEventHubsSession() as session:
            yield session

Exports:
    LiveEventHubsSession: Test-run orchestrator
"""

from typing import Callable, Optional

from config import EventHubsTestConfig, get_config
from config.env_validation import log_validation_results
from exceptions import ConfigurationError
from infrastructure.auth import ManagementTokenProvider, create_azure_credential
from infrastructure.retry import RetryPolicy
from util_logger import LoggerFactory, ComponentType

from .eventhub_scope import EventHubScopeManager
from .namespace import NamespaceProperties, parse_namespace_properties
from .resource_manager import ClientFactory, LiveResourceManager

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "LiveEventHubsSession")


class LiveEventHubsSession:
    """
    Owns the namespace and the shared collaborators of one test run.

    Args:
        config: Configuration; loaded (and validated) from the environment if omitted
        token_provider: Injected token provider; if omitted, the session creates a
            DefaultAzureCredential and closes it on close()
        client_factory: Builds a management repository from a credential; defaults
            to EventHubManagementRepository for the configured subscription
        retry_policy_factory: Optional RetryPolicy factory
    """

    def __init__(
        self,
        config: Optional[EventHubsTestConfig] = None,
        token_provider=None,
        client_factory: Optional[ClientFactory] = None,
        retry_policy_factory: Optional[Callable[[], RetryPolicy]] = None
    ):
        self._validate_env = config is None
        self._config = config
        self._token_provider = token_provider
        self._owns_token_provider = token_provider is None
        self._client_factory = client_factory
        self._retry_policy_factory = retry_policy_factory

        self._namespace: Optional[NamespaceProperties] = None
        self._resource_manager: Optional[LiveResourceManager] = None
        self._scope_manager: Optional[EventHubScopeManager] = None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def config(self) -> EventHubsTestConfig:
        if self._config is None:
            self._config = get_config()
        return self._config

    @property
    def namespace(self) -> NamespaceProperties:
        if self._namespace is None:
            raise RuntimeError("Session not started")
        return self._namespace

    @property
    def resource_manager(self) -> LiveResourceManager:
        if self._resource_manager is None:
            raise RuntimeError("Session not started")
        return self._resource_manager

    @property
    def scope_manager(self) -> EventHubScopeManager:
        if self._scope_manager is None:
            raise RuntimeError("Session not started")
        return self._scope_manager

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> NamespaceProperties:
        """
        Resolve the namespace for the run and build the scope manager.

        Raises:
            ConfigurationError: Invalid environment, or an existing Event Hub
                configured without an existing namespace.
        """
        if self._namespace is not None:
            return self._namespace

        if self._validate_env and not log_validation_results(logger):
            raise ConfigurationError("Live Event Hubs environment is invalid; see ENV VAR ERROR log entries")

        config = self.config
        if config.uses_existing_event_hub and not config.uses_existing_namespace:
            raise ConfigurationError(
                "EVENTHUBS_EVENT_HUB_NAME requires EVENTHUBS_NAMESPACE_CONNECTION_STRING; "
                "an existing Event Hub cannot live in a namespace created for this run"
            )

        if self._token_provider is None:
            self._token_provider = ManagementTokenProvider(create_azure_credential(), config.management_scope)

        if self._client_factory is None:
            from infrastructure.eventhub_management import EventHubManagementRepository
            self._client_factory = EventHubManagementRepository.factory(config.subscription_id)

        self._resource_manager = LiveResourceManager(
            config,
            self._token_provider,
            self._client_factory,
            self._retry_policy_factory
        )

        try:
            if config.uses_existing_namespace:
                namespace = parse_namespace_properties(config.namespace_connection_string)
                logger.info(f"🔗 Using existing namespace: {namespace.name}")
            else:
                namespace = await self._resource_manager.create_namespace()
        except Exception:
            # __aexit__ does not run when __aenter__ fails
            await self._close_token_provider()
            raise

        self._namespace = namespace
        self._scope_manager = EventHubScopeManager(self._resource_manager, namespace.name)
        return namespace

    async def close(self) -> None:
        """
        Delete the namespace if this session created it, then release the credential.

        Namespace deletion failures propagate; the credential is closed regardless.
        """
        try:
            if self._namespace is not None and self._namespace.was_created:
                await self._resource_manager.delete_namespace(self._namespace.name)
        finally:
            self._namespace = None
            self._scope_manager = None
            await self._close_token_provider()

    async def _close_token_provider(self) -> None:
        if self._owns_token_provider and self._token_provider is not None:
            await self._token_provider.close()
            self._token_provider = None

    async def __aenter__(self) -> "LiveEventHubsSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
