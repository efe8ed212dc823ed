"""
Configuration Package - Live Event Hubs test configuration.

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── eventhubs_config.py      # EventHubsTestConfig (pydantic)
    ├── defaults.py              # Default value constants
    └── env_validation.py        # Regex validation of environment variables

Usage:
    # Singleton pattern (preferred)
    from config import get_config
    config = get_config()
    resource_group = config.resource_group

    # Debug output
    from config import debug_config
    info = debug_config()  # Connection string masked
"""

from typing import Optional

from .defaults import AzureDefaults, NamespaceDefaults, EventHubDefaults, RetryDefaults
from .eventhubs_config import EventHubsTestConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[EventHubsTestConfig] = None


def get_config() -> EventHubsTestConfig:
    """
    Get global configuration singleton.

    Returns:
        EventHubsTestConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = EventHubsTestConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, connection string masked
    """
    try:
        return get_config().debug_dict()
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'EventHubsTestConfig',
    'get_config',
    'reset_config',
    'debug_config',

    # Defaults
    'AzureDefaults',
    'NamespaceDefaults',
    'EventHubDefaults',
    'RetryDefaults',
]
