# ============================================================================
# ENVIRONMENT VARIABLE VALIDATION
# ============================================================================
# STATUS: Configuration - Session startup validation with regex patterns
# PURPOSE: Validate env vars before any Azure call to fail fast with clear messages
# LAST_REVIEWED: 16 OCT 2026
# ============================================================================
"""
Environment Variable Validation Module.

Validates environment variables at session startup using regex patterns to
catch configuration errors EARLY with clear, actionable error messages,
before a namespace is provisioned in the wrong place.

Design Philosophy:
    - FAIL FAST: Catch config errors before the first management call
    - CLEAR ERRORS: Show exactly what's wrong and how to fix it
    - REGEX VALIDATION: Format validation, not just presence checks
    - ZERO DEPENDENCIES: Only standard library imports

Usage:
    from config.env_validation import validate_environment, ENV_VAR_RULES

    # Returns list of ValidationError (empty if all valid)
    errors = validate_environment()

    for error in errors:
        print(f"{error.var_name}: {error.message}")
        print(f"  Fix: {error.fix_suggestion}")

Example Validations:
    - EVENTHUBS_SUBSCRIPTION_ID must be a GUID
    - EVENTHUBS_RESOURCE_GROUP must be a valid resource group name
    - EVENTHUBS_NAMESPACE_CONNECTION_STRING must carry an Endpoint key
    - EVENTHUBS_EVENT_HUB_NAME must follow Event Hub naming rules

Exports:
    ENV_VAR_RULES: Dict of all validation rules
    ValidationError: Dataclass for validation errors
    validate_environment: Main validation function
    validate_single_var: Validate one variable
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any


# ============================================================================
# VALIDATION ERROR
# ============================================================================

@dataclass
class ValidationError:
    """Result of a failed environment variable validation."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        """Mask potentially sensitive values."""
        if value is None:
            return None
        sensitive_keywords = ["password", "secret", "key", "token", "connection"]
        var_lower = self.var_name.lower()
        if any(kw in var_lower for kw in sensitive_keywords):
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        default_value: Default value used if not set (for warning messages)
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    default_value: Optional[str] = None


# ============================================================================
# VALIDATION RULES - Single source of truth for env var formats
# ============================================================================

_GUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
# Resource groups: 1-90 chars, letters, digits, underscore, hyphen, period, parentheses; no trailing period
_RESOURCE_GROUP = re.compile(r"^[-\w._()]{0,89}[-\w_()]$")
_CONNECTION_STRING = re.compile(r"(^|;)\s*Endpoint\s*=\s*[^;]+", re.IGNORECASE)
# Event Hub names: letters, digits, period, hyphen, underscore; start and end alphanumeric
_EVENT_HUB_NAME = re.compile(r"^[a-zA-Z0-9](?:[a-zA-Z0-9._-]{0,254}[a-zA-Z0-9])?$")
_AUTH_RULE_NAME = re.compile(r"^[a-zA-Z0-9._-]{1,256}$")
_HTTPS_SCOPE = re.compile(r"^https://[a-z0-9][a-z0-9.-]+\.[a-z]{2,}/\.default$", re.IGNORECASE)
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_NON_NEGATIVE_NUMBER = re.compile(r"^[0-9]+(\.[0-9]+)?$")


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # =========================================================================
    # AZURE PLACEMENT (Critical - no defaults)
    # =========================================================================
    "EVENTHUBS_SUBSCRIPTION_ID": EnvVarRule(
        pattern=_GUID,
        pattern_description="Subscription GUID (8-4-4-4-12 hex)",
        required=True,
        fix_suggestion="Use the subscription id from 'az account show --query id'",
        example="00000000-1111-2222-3333-444444444444",
    ),

    "EVENTHUBS_RESOURCE_GROUP": EnvVarRule(
        pattern=_RESOURCE_GROUP,
        pattern_description="Resource group name (1-90 chars, no trailing period)",
        required=True,
        fix_suggestion="Set the resource group that will hold test namespaces",
        example="eventhubs-live-tests",
    ),

    # =========================================================================
    # EXISTING RESOURCES (Optional - skip provisioning)
    # =========================================================================
    "EVENTHUBS_NAMESPACE_CONNECTION_STRING": EnvVarRule(
        pattern=_CONNECTION_STRING,
        pattern_description="Namespace connection string containing an Endpoint=sb://... pair",
        required=False,
        fix_suggestion="Copy the connection string of a shared access policy on the namespace",
        example="Endpoint=sb://mynamespace.servicebus.windows.net/;SharedAccessKeyName=...;SharedAccessKey=...",
    ),

    "EVENTHUBS_EVENT_HUB_NAME": EnvVarRule(
        pattern=_EVENT_HUB_NAME,
        pattern_description="Event Hub name (letters, digits, '.', '-', '_'; alphanumeric at both ends)",
        required=False,
        fix_suggestion="Use the name of an Event Hub inside the configured namespace",
        example="live-tests",
    ),

    "EVENTHUBS_SHARED_ACCESS_KEY_NAME": EnvVarRule(
        pattern=_AUTH_RULE_NAME,
        pattern_description="Authorization rule name",
        required=False,
        fix_suggestion="Use an authorization rule that exists on provisioned namespaces",
        example="RootManageSharedAccessKey",
        default_value="RootManageSharedAccessKey",
    ),

    "EVENTHUBS_MANAGEMENT_SCOPE": EnvVarRule(
        pattern=_HTTPS_SCOPE,
        pattern_description="HTTPS resource scope ending in /.default",
        required=False,
        fix_suggestion="Use the Resource Manager scope of your cloud",
        example="https://management.azure.com/.default",
        default_value="https://management.azure.com/.default",
    ),

    # =========================================================================
    # TUNING (Optional)
    # =========================================================================
    "EVENTHUBS_NAMESPACE_CAPACITY": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer (throughput units)",
        required=False,
        fix_suggestion="Use a value between 1 and 40",
        example="12",
        default_value="12",
    ),

    "EVENTHUBS_RETRY_MAX_ATTEMPTS": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer",
        required=False,
        fix_suggestion="Use a small number of attempts like 5",
        example="5",
        default_value="5",
    ),

    "EVENTHUBS_RETRY_BASE_DELAY": EnvVarRule(
        pattern=_NON_NEGATIVE_NUMBER,
        pattern_description="Non-negative number of seconds",
        required=False,
        fix_suggestion="Use a delay like 1.0",
        example="1.0",
        default_value="1.0",
    ),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[ValidationError]:
    """
    Validate a single environment variable against its rule.

    Args:
        var_name: Environment variable name
        rule: Validation rule to apply
        include_warnings: Whether to return warnings for vars using defaults

    Returns:
        ValidationError if validation fails or warning if using default, None if passes
    """
    value = os.environ.get(var_name)

    if rule.required and not value:
        return ValidationError(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    if not value:
        if include_warnings and rule.default_value is not None:
            return ValidationError(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    # Anchored patterns reject surrounding whitespace; the connection string rule is a search
    if not rule.pattern.search(value):
        return ValidationError(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    return None


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[ValidationError]:
    """
    Validate all environment variables against their rules.

    Args:
        rules: Optional custom rules dict (defaults to ENV_VAR_RULES)
        include_warnings: Whether to include warnings for vars using defaults

    Returns:
        List of ValidationError objects (errors and optionally warnings)
    """
    if rules is None:
        rules = ENV_VAR_RULES

    results = []
    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    return results


def log_validation_results(logger=None) -> bool:
    """
    Log validation results at appropriate levels.

    Logs errors at ERROR level, warnings at WARNING level.
    Returns True if no errors (warnings are OK).

    Args:
        logger: Optional logger instance (uses print if None)

    Returns:
        True if no errors, False if there are errors
    """
    all_results = validate_environment(include_warnings=True)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    def _log(level: str, msg: str):
        if logger:
            getattr(logger, level.lower())(msg)
        else:
            print(f"[{level.upper()}] {msg}")

    for error in errors:
        _log("error", f"ENV VAR ERROR: {error.var_name} - {error.message}")
        _log("error", f"  Expected: {error.expected_pattern}")
        _log("error", f"  Fix: {error.fix_suggestion}")

    if warnings:
        _log("warning", f"ENV VARS: {len(warnings)} optional variables using defaults:")
        for warning in warnings:
            default_val = warning.expected_pattern.replace("Default: ", "")
            _log("warning", f"  {warning.var_name} → {default_val}")

    if errors:
        _log("error", f"❌ STARTUP_FAILED: {len(errors)} environment variable errors")
        return False
    elif warnings:
        _log("info", f"✅ Environment validation passed ({len(warnings)} vars using defaults)")
        return True
    else:
        _log("info", "✅ Environment validation passed (all vars explicitly set)")
        return True


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ENV_VAR_RULES",
    "EnvVarRule",
    "ValidationError",
    "validate_environment",
    "validate_single_var",
    "log_validation_results",
]
