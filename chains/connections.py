"""
chains/connections.py - Per-domain provider and signer registry.

Holds at most one provider and at most one signer per domain id and keeps
them consistent:
- a signer is only kept while it is attached to a provider
- registering a provider moves the current signer onto it, or drops it
- removing a signer never leaves the domain without read access

Rebinding is an explicit capability check (see rebind()) rather than
"try connect, catch anything".
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from chains.domains import DomainDirectory
from core.constants import ConnectionKind
from core.exceptions import (
    ConnectionNotFoundError,
    InvariantViolationError,
    MissingProviderError,
    NotFoundError,
    SignerHasNoProviderError,
)
from core.logging import get_logger
from core.models import NameOrDomain, Provider, Signer

logger = get_logger(__name__)


class RebindStatus(str, Enum):
    """Outcome of asking a signer to attach to another provider."""
    BOUND = "BOUND"
    UNSUPPORTED = "UNSUPPORTED"
    INVALID = "INVALID"


@dataclass
class RebindResult:
    status: RebindStatus
    signer: Optional[Signer] = None

    @property
    def bound(self) -> bool:
        return self.status == RebindStatus.BOUND


def signer_provider(signer: Any) -> Optional[Provider]:
    """Provider a signer carries, or None."""
    return getattr(signer, "provider", None)


def rebind(signer: Signer, provider: Provider) -> RebindResult:
    """
    Produce a copy of `signer` bound to `provider`.

    UNSUPPORTED: the signer has no callable connect(), sets
        can_connect = False, or its connect() raises NotImplementedError.
    INVALID: connect() returned nothing, or a handle that is not attached
        to `provider`.
    BOUND: result.signer is attached to `provider`.

    Any other exception raised inside the signer's own connect() propagates.
    """
    connect = getattr(signer, "connect", None)
    if not callable(connect) or getattr(signer, "can_connect", True) is False:
        return RebindResult(RebindStatus.UNSUPPORTED)

    try:
        bound = connect(provider)
    except NotImplementedError:
        return RebindResult(RebindStatus.UNSUPPORTED)

    if bound is None or signer_provider(bound) is not provider:
        return RebindResult(RebindStatus.INVALID, bound)

    return RebindResult(RebindStatus.BOUND, bound)


class ConnectionRegistry:
    """
    Registry of provider/signer handles by domain id.

    Name references are resolved through the shared DomainDirectory.
    Registering a provider requires a registered domain; every other
    operation accepts raw ids whether registered or not.
    """

    def __init__(self, directory: DomainDirectory):
        self._directory = directory
        self._providers: dict[int, Provider] = {}
        self._signers: dict[int, Signer] = {}

    # -------------------------------------------------------------------------
    # Providers
    # -------------------------------------------------------------------------

    def register_provider(self, name_or_domain: NameOrDomain, provider: Provider) -> None:
        """
        Register a provider for a domain, replacing any previous one.

        An existing signer is moved onto the new provider. A signer that
        cannot be moved is dropped rather than left on the old provider.

        Raises:
            DomainNotFoundError: Unknown domain name
            NotFoundError: Domain id not registered
        """
        domain_id = self._directory.must_get_domain(name_or_domain).id

        signer = self._signers.get(domain_id)
        if signer is not None:
            result = rebind(signer, provider)
            if result.bound:
                self._signers[domain_id] = result.signer
            else:
                del self._signers[domain_id]
                logger.warning(
                    "Dropping signer that cannot follow new provider",
                    extra={"context": {"domain_id": domain_id, "rebind": result.status.value}},
                )

        self._providers[domain_id] = provider
        logger.debug(
            "Provider registered",
            extra={"context": {"domain_id": domain_id, "provider": type(provider).__name__}},
        )

    def get_provider(self, name_or_domain: NameOrDomain) -> Optional[Provider]:
        return self._providers.get(self._directory.resolve_domain(name_or_domain))

    def must_get_provider(self, name_or_domain: NameOrDomain) -> Provider:
        provider = self.get_provider(name_or_domain)
        if provider is None:
            raise NotFoundError("Provider", name_or_domain)
        return provider

    @property
    def missing_providers(self) -> list[int]:
        """Registered domain ids that have no provider."""
        return [d for d in self._directory.domain_numbers if d not in self._providers]

    # -------------------------------------------------------------------------
    # Signers
    # -------------------------------------------------------------------------

    def register_signer(self, name_or_domain: NameOrDomain, signer: Signer) -> None:
        """
        Register a signer for a domain.

        The registered provider wins: if one exists and the signer can be
        bound to it, the bound copy is stored. Otherwise the signer's own
        provider becomes the domain provider and the signer is stored as is.

        Raises:
            MissingProviderError: No registered provider and signer has none
            SignerHasNoProviderError: Rebind failed and signer has no provider
        """
        domain_id = self._directory.resolve_domain(name_or_domain)

        provider = self._providers.get(domain_id)
        if provider is None and signer_provider(signer) is None:
            raise MissingProviderError(domain_id)

        if provider is not None:
            result = rebind(signer, provider)
            if result.bound:
                self._signers[domain_id] = result.signer
                logger.debug(
                    "Signer registered on existing provider",
                    extra={"context": {"domain_id": domain_id}},
                )
                return
            logger.debug(
                "Signer not rebound, falling back to its own provider",
                extra={"context": {"domain_id": domain_id, "rebind": result.status.value}},
            )

        own_provider = signer_provider(signer)
        if own_provider is None:
            raise SignerHasNoProviderError(domain_id)

        self.register_provider(domain_id, own_provider)
        self._signers[domain_id] = signer
        logger.debug(
            "Signer registered with its own provider",
            extra={"context": {"domain_id": domain_id}},
        )

    def unregister_signer(self, name_or_domain: NameOrDomain) -> None:
        """
        Remove the signer from a domain, keeping read access.

        If the domain has no provider, the removed signer's provider takes
        the provider slot.

        Raises:
            InvariantViolationError: Stored signer has lost its provider
        """
        domain_id = self._directory.resolve_domain(name_or_domain)
        signer = self._signers.get(domain_id)
        if signer is None:
            return

        own_provider = signer_provider(signer)
        if own_provider is None:
            raise InvariantViolationError(
                "Registered signer is missing its provider",
                {"domain_id": domain_id},
            )

        del self._signers[domain_id]
        if domain_id not in self._providers:
            self._providers[domain_id] = own_provider
            logger.info(
                "Signer provider kept as domain provider",
                extra={"context": {"domain_id": domain_id}},
            )

        logger.debug("Signer unregistered", extra={"context": {"domain_id": domain_id}})

    def clear_signers(self) -> None:
        """Unregister the signer of every registered domain."""
        for domain_id in self._directory.domain_numbers:
            self.unregister_signer(domain_id)

    def get_signer(self, name_or_domain: NameOrDomain) -> Optional[Signer]:
        return self._signers.get(self._directory.resolve_domain(name_or_domain))

    def must_get_signer(self, name_or_domain: NameOrDomain) -> Signer:
        signer = self.get_signer(name_or_domain)
        if signer is None:
            raise NotFoundError("Signer", name_or_domain)
        return signer

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def get_connection(self, name_or_domain: NameOrDomain) -> Union[Signer, Provider, None]:
        """
        Most privileged connection for a domain: the signer if registered,
        else the provider, else None.
        """
        domain_id = self._directory.resolve_domain(name_or_domain)
        signer = self._signers.get(domain_id)
        if signer is not None:
            return signer
        return self._providers.get(domain_id)

    def must_get_connection(self, name_or_domain: NameOrDomain) -> Union[Signer, Provider]:
        connection = self.get_connection(name_or_domain)
        if connection is None:
            raise ConnectionNotFoundError(name_or_domain)
        return connection

    def connection_kind(self, name_or_domain: NameOrDomain) -> ConnectionKind:
        domain_id = self._directory.resolve_domain(name_or_domain)
        if domain_id in self._signers:
            return ConnectionKind.SIGNER
        if domain_id in self._providers:
            return ConnectionKind.PROVIDER
        return ConnectionKind.NONE

    async def get_address(self, name_or_domain: NameOrDomain) -> Optional[str]:
        """Address of the domain's signer, or None without a signer."""
        signer = self.get_signer(name_or_domain)
        if signer is None:
            return None
        return await signer.get_address()
