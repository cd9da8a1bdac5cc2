"""
core - Shared models, errors and logging for the domain registry.

This package contains:
- models.py: Domain value and connection handle protocols
- constants.py: Enums and defaults
- exceptions.py: Typed exceptions with error codes
- logging.py: Structured JSON / console logging
"""

from core.constants import ConnectionKind, DEFAULT_CONFIRMATIONS, ErrorCode
from core.exceptions import (
    AmbiguousDomainError,
    ConnectionNotFoundError,
    DomainNotFoundError,
    InfraError,
    InvalidPolicyError,
    InvariantViolationError,
    MissingProviderError,
    MultiProviderError,
    NotFoundError,
    SignerHasNoProviderError,
)
from core.logging import get_logger, setup_logging
from core.models import Domain, NameOrDomain, Signer, TxOverrides

__all__ = [
    # Constants
    "ConnectionKind",
    "DEFAULT_CONFIRMATIONS",
    "ErrorCode",
    # Exceptions
    "AmbiguousDomainError",
    "ConnectionNotFoundError",
    "DomainNotFoundError",
    "InfraError",
    "InvalidPolicyError",
    "InvariantViolationError",
    "MissingProviderError",
    "MultiProviderError",
    "NotFoundError",
    "SignerHasNoProviderError",
    # Models
    "Domain",
    "NameOrDomain",
    "Signer",
    "TxOverrides",
    # Logging
    "get_logger",
    "setup_logging",
]
