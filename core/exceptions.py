"""
Typed exceptions for the multi-domain registry.

Every error carries an ErrorCode so callers can tell lookup misses,
consistency faults and infrastructure failures apart.
"""

from typing import Any, Optional

from core.constants import ErrorCode


class MultiProviderError(Exception):
    """Base exception for the registry."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"


class NotFoundError(MultiProviderError):
    """A must_get_* lookup found nothing for the resolved domain."""

    def __init__(
        self,
        kind: str,
        ref: Any,
        code: ErrorCode = ErrorCode.NOT_FOUND,
    ):
        super().__init__(
            f"{kind} not found: {ref}",
            code,
            {"kind": kind, "ref": ref},
        )
        self.kind = kind
        self.ref = ref


class DomainNotFoundError(NotFoundError):
    """A domain name matched no registered domain."""

    def __init__(self, name: str):
        super().__init__("Domain", name, ErrorCode.DOMAIN_NOT_FOUND)


class AmbiguousDomainError(MultiProviderError):
    """A domain name matched more than one registered domain (strict mode)."""

    def __init__(self, name: str, domain_ids: list[int]):
        super().__init__(
            f"Domain name is ambiguous: {name} matches {domain_ids}",
            ErrorCode.DOMAIN_AMBIGUOUS,
            {"name": name, "domain_ids": domain_ids},
        )
        self.domain_ids = domain_ids


class ConnectionNotFoundError(MultiProviderError):
    """Neither a signer nor a provider is registered for the domain."""

    def __init__(self, ref: Any):
        super().__init__(
            f"Connection not found: {ref}",
            ErrorCode.CONNECTION_NOT_FOUND,
            {"ref": ref},
        )


class MissingProviderError(MultiProviderError):
    """Signer registration with no registered provider and no signer provider."""

    def __init__(self, domain_id: int):
        super().__init__(
            "Must have a provider before registering signer",
            ErrorCode.MISSING_PROVIDER,
            {"domain_id": domain_id},
        )


class SignerHasNoProviderError(MultiProviderError):
    """Signer could not be rebound and carries no provider of its own."""

    def __init__(self, domain_id: int):
        super().__init__(
            "Signer does not permit reconnect and has no provider",
            ErrorCode.SIGNER_HAS_NO_PROVIDER,
            {"domain_id": domain_id},
        )


class InvariantViolationError(MultiProviderError):
    """
    Registry state broke the signer/provider invariant.

    Indicates a bug in consistency maintenance; not recoverable by retrying.
    """

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INVARIANT_VIOLATION, details)


class InvalidPolicyError(MultiProviderError):
    """Overrides or confirmations rejected at registration."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INVALID_POLICY, details)


class InfraError(MultiProviderError):
    """Infrastructure-related errors (RPC transport, config files)."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INFRA_RPC_ERROR,
        details: Optional[dict] = None,
    ):
        super().__init__(message, code, details)


__all__ = [
    "AmbiguousDomainError",
    "ConnectionNotFoundError",
    "DomainNotFoundError",
    "ErrorCode",
    "InfraError",
    "InvalidPolicyError",
    "InvariantViolationError",
    "MissingProviderError",
    "MultiProviderError",
    "NotFoundError",
    "SignerHasNoProviderError",
]
