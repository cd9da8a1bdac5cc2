"""
chains/multi_provider.py - Multi-domain connection manager.

Groups every domain connection under one explicitly constructed object:

    mp = MultiProvider()
    mp.register_domain(Domain(id=42161, name="arbitrum"))
    mp.register_rpc_provider("arbitrum", "https://arb1.arbitrum.io/rpc")
    mp.register_signer("arbitrum", signer)
    mp.get_connection(42161)   # -> signer

There is no shared default instance; the owner decides its lifetime and
passes it to whoever needs it.
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Optional, Union

from chains.connections import ConnectionRegistry
from chains.domains import DomainDirectory
from chains.policy import PolicyStore
from chains.providers import RPCProvider
from config import load_domains
from core.constants import ErrorCode
from core.exceptions import InfraError
from core.logging import get_logger
from core.models import Domain, NameOrDomain, Provider, Signer, TxOverrides

logger = get_logger(__name__)

# (domain_id, rpc_urls) -> provider handle
ProviderFactory = Callable[[int, list[str]], Provider]


class MultiProvider:
    """
    Domains, their provider/signer connections and transaction policy.

    All three parts share one DomainDirectory, so a domain may be referenced
    by name or id everywhere.
    """

    def __init__(self, strict_names: bool = False):
        self.directory = DomainDirectory(strict_names=strict_names)
        self.connections = ConnectionRegistry(self.directory)
        self.policy = PolicyStore(self.directory)

    # -------------------------------------------------------------------------
    # Domains
    # -------------------------------------------------------------------------

    def register_domain(self, domain: Domain) -> None:
        self.directory.register_domain(domain)

    def resolve_domain(self, name_or_domain: NameOrDomain) -> int:
        return self.directory.resolve_domain(name_or_domain)

    def known_domain(self, name_or_domain: NameOrDomain) -> bool:
        return self.directory.known_domain(name_or_domain)

    def get_domain(self, name_or_domain: NameOrDomain) -> Optional[Domain]:
        return self.directory.get_domain(name_or_domain)

    def must_get_domain(self, name_or_domain: NameOrDomain) -> Domain:
        return self.directory.must_get_domain(name_or_domain)

    def resolve_domain_name(self, name_or_domain: NameOrDomain) -> Optional[str]:
        return self.directory.resolve_domain_name(name_or_domain)

    def must_resolve_domain_name(self, name_or_domain: NameOrDomain) -> str:
        return self.directory.must_resolve_domain_name(name_or_domain)

    @property
    def domain_numbers(self) -> list[int]:
        return self.directory.domain_numbers

    @property
    def domain_names(self) -> list[str]:
        return self.directory.domain_names

    def remote_domain_numbers(self, domain: int) -> list[int]:
        return self.directory.remote_domain_numbers(domain)

    @property
    def missing_providers(self) -> list[int]:
        return self.connections.missing_providers

    # -------------------------------------------------------------------------
    # Connections
    # -------------------------------------------------------------------------

    def register_provider(self, name_or_domain: NameOrDomain, provider: Provider) -> None:
        self.connections.register_provider(name_or_domain, provider)

    def register_rpc_provider(
        self,
        name_or_domain: NameOrDomain,
        rpc: Union[str, list[str]],
        provider_factory: Optional[ProviderFactory] = None,
    ) -> Provider:
        """
        Build a provider for RPC URL(s) and register it.

        Args:
            rpc: One RPC URL or a failover list
            provider_factory: Builds the provider; defaults to RPCProvider.
                Networks needing a special provider class pass their own.

        Returns:
            The registered provider
        """
        domain_id = self.directory.must_get_domain(name_or_domain).id
        urls = [rpc] if isinstance(rpc, str) else list(rpc)
        factory = provider_factory or RPCProvider
        provider = factory(domain_id, urls)
        self.connections.register_provider(domain_id, provider)
        return provider

    def get_provider(self, name_or_domain: NameOrDomain) -> Optional[Provider]:
        return self.connections.get_provider(name_or_domain)

    def must_get_provider(self, name_or_domain: NameOrDomain) -> Provider:
        return self.connections.must_get_provider(name_or_domain)

    def register_signer(self, name_or_domain: NameOrDomain, signer: Signer) -> None:
        self.connections.register_signer(name_or_domain, signer)

    def unregister_signer(self, name_or_domain: NameOrDomain) -> None:
        self.connections.unregister_signer(name_or_domain)

    def clear_signers(self) -> None:
        self.connections.clear_signers()

    def get_signer(self, name_or_domain: NameOrDomain) -> Optional[Signer]:
        return self.connections.get_signer(name_or_domain)

    def must_get_signer(self, name_or_domain: NameOrDomain) -> Signer:
        return self.connections.must_get_signer(name_or_domain)

    def get_connection(self, name_or_domain: NameOrDomain) -> Union[Signer, Provider, None]:
        return self.connections.get_connection(name_or_domain)

    def must_get_connection(self, name_or_domain: NameOrDomain) -> Union[Signer, Provider]:
        return self.connections.must_get_connection(name_or_domain)

    async def get_address(self, name_or_domain: NameOrDomain) -> Optional[str]:
        return await self.connections.get_address(name_or_domain)

    # -------------------------------------------------------------------------
    # Policy
    # -------------------------------------------------------------------------

    def register_overrides(self, name_or_domain: NameOrDomain, overrides: Mapping[str, Any]) -> None:
        self.policy.register_overrides(name_or_domain, overrides)

    def get_overrides(self, name_or_domain: NameOrDomain) -> TxOverrides:
        return self.policy.get_overrides(name_or_domain)

    def register_confirmations(self, name_or_domain: NameOrDomain, confirmations: int) -> None:
        self.policy.register_confirmations(name_or_domain, confirmations)

    def get_confirmations(self, name_or_domain: NameOrDomain) -> int:
        return self.policy.get_confirmations(name_or_domain)

    # -------------------------------------------------------------------------
    # Config / reporting
    # -------------------------------------------------------------------------

    @classmethod
    def from_config(
        cls,
        domains_config: Mapping[str, Any],
        provider_factory: Optional[ProviderFactory] = None,
        strict_names: bool = False,
    ) -> "MultiProvider":
        """
        Build a MultiProvider from a domains config mapping.

        Domains are registered first, so providers and policy can refer to
        any of them.

        Raises:
            InfraError: If an entry is malformed
        """
        mp = cls(strict_names=strict_names)

        entries = []
        for key, entry in domains_config.items():
            if not isinstance(entry, Mapping) or not isinstance(entry.get("domain_id"), int):
                raise InfraError(
                    f"Domain config {key!r} needs an integer domain_id",
                    code=ErrorCode.INFRA_CONFIG_ERROR,
                    details={"domain_key": key},
                )
            domain = Domain(id=entry["domain_id"], name=str(entry.get("name", key)))
            mp.register_domain(domain)
            entries.append((domain, entry))

        for domain, entry in entries:
            endpoints = entry.get("rpc_endpoints") or []
            if endpoints:
                mp.register_rpc_provider(domain.id, endpoints, provider_factory)
            if "confirmations" in entry:
                mp.register_confirmations(domain.id, entry["confirmations"])
            if entry.get("overrides"):
                mp.register_overrides(domain.id, entry["overrides"])

        logger.info(
            f"Loaded {len(entries)} domains",
            extra={"context": {
                "domains": mp.domain_names,
                "missing_providers": mp.missing_providers,
            }},
        )
        return mp

    def summary(self) -> dict:
        """Per-domain view of connections and policy."""
        return {
            "domains": [
                {
                    "id": domain.id,
                    "name": domain.name,
                    "connection": self.connections.connection_kind(domain.id).value,
                    "confirmations": self.get_confirmations(domain.id),
                    "overrides": self.get_overrides(domain.id),
                }
                for domain in self.directory.domains
            ],
            "missing_providers": self.missing_providers,
        }


def load_multi_provider(
    config_path: Optional[Union[str, Path]] = None,
    provider_factory: Optional[ProviderFactory] = None,
    strict_names: bool = False,
) -> MultiProvider:
    """
    Load the domains config and build a MultiProvider from it.

    Convenience function for application startup.
    """
    return MultiProvider.from_config(
        load_domains(config_path),
        provider_factory=provider_factory,
        strict_names=strict_names,
    )
