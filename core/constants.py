"""
Constants for the multi-domain registry.

Contains enums, defaults, and configuration constants.
"""

from enum import Enum
from typing import Final

# =============================================================================
# POLICY DEFAULTS
# =============================================================================

# Confirmations required when none are registered for a domain
DEFAULT_CONFIRMATIONS: Final[int] = 0

# RPC defaults
DEFAULT_RPC_TIMEOUT_SECONDS: Final[int] = 10
DEFAULT_RPC_MAX_CONNECTIONS: Final[int] = 10

# Config file holding the domain directory
DEFAULT_DOMAINS_FILE: Final[str] = "domains.yaml"


class ErrorCode(str, Enum):
    """
    Error codes carried by every registry exception.

    Values are stable strings; logs and callers may match on them.
    """
    # Lookup failures
    DOMAIN_NOT_FOUND = "DOMAIN_NOT_FOUND"
    DOMAIN_AMBIGUOUS = "DOMAIN_AMBIGUOUS"
    NOT_FOUND = "NOT_FOUND"
    CONNECTION_NOT_FOUND = "CONNECTION_NOT_FOUND"

    # Signer/provider consistency
    MISSING_PROVIDER = "MISSING_PROVIDER"
    SIGNER_HAS_NO_PROVIDER = "SIGNER_HAS_NO_PROVIDER"
    INVARIANT_VIOLATION = "INVARIANT_VIOLATION"

    # Policy
    INVALID_POLICY = "INVALID_POLICY"

    # Infrastructure
    INFRA_RPC_ERROR = "INFRA_RPC_ERROR"
    INFRA_CONFIG_ERROR = "INFRA_CONFIG_ERROR"

    UNKNOWN = "UNKNOWN"


class ConnectionKind(str, Enum):
    """Which handle get_connection() would hand out for a domain."""
    SIGNER = "SIGNER"
    PROVIDER = "PROVIDER"
    NONE = "NONE"
