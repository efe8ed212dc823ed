# ============================================================================
# EXCEPTIONS
# ============================================================================
# PURPOSE: Exception hierarchy separating contract violations, configuration
#          problems and provisioning failures
# EXPORTS: ContractViolationError, BusinessLogicError, ResourceProvisioningError,
#          ConfigurationError, ConnectionStringError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Distinguishes between:
1. Contract Violations (programming bugs in the calling test code)
2. Configuration errors (the environment cannot support a live run)
3. Business Logic Failures (Azure refused or could not complete a request)

Errors raised by the Azure SDK (azure.core.exceptions) are NOT wrapped in
this hierarchy; they propagate unchanged so their status code and error
code stay available to the caller.
"""


class ContractViolationError(TypeError):
    """
    Raised when component contracts are violated (programming bugs).

    These should NEVER be caught and handled - they indicate bugs
    that need to be fixed in the calling code.

    Examples:
        - Caller tag passed as something other than a string
        - Partition count passed as a float or bool
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.
    """
    pass


class ResourceProvisioningError(BusinessLogicError):
    """
    Azure accepted a provisioning request but the result is unusable.

    Examples:
        - Namespace created but its access keys carry no connection string
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    Fatal for the test session.

    Examples:
        - Missing EVENTHUBS_SUBSCRIPTION_ID
        - Existing Event Hub configured without an existing namespace
    """
    pass


class ConnectionStringError(ValueError):
    """
    A connection string could not be parsed into a namespace name.

    Examples:
        - No Endpoint key present
        - Endpoint value with an empty host
    """
    pass
