"""
chains/domains.py - Domain directory.

Stores registered domains keyed by canonical id and turns any domain
reference (name or id) into that id. ConnectionRegistry and PolicyStore
resolve through this class and never match names themselves.
"""

from typing import Optional

from core.exceptions import AmbiguousDomainError, DomainNotFoundError, NotFoundError
from core.logging import get_logger
from core.models import Domain, NameOrDomain

logger = get_logger(__name__)


class DomainDirectory:
    """
    Registry of known domains.

    Names are aliases, not keys: two domains may share a name. In that case
    name resolution returns the first match in registration order and logs
    a warning, or raises AmbiguousDomainError when strict_names is set.
    """

    def __init__(self, strict_names: bool = False):
        self.strict_names = strict_names
        self._domains: dict[int, Domain] = {}

    def register_domain(self, domain: Domain) -> None:
        """Insert or overwrite the domain stored under domain.id."""
        previous = self._domains.get(domain.id)
        self._domains[domain.id] = domain

        if previous is not None and previous.name != domain.name:
            logger.info(
                "Domain name replaced",
                extra={"context": {
                    "domain_id": domain.id,
                    "old_name": previous.name,
                    "new_name": domain.name,
                }},
            )
        else:
            logger.debug(
                "Domain registered",
                extra={"context": {"domain_id": domain.id, "domain_name": domain.name}},
            )

    def resolve_domain(self, name_or_domain: NameOrDomain) -> int:
        """
        Resolve a domain name (or number) to the canonical number.

        Numbers are returned unchanged, registered or not. Names are matched
        case-insensitively against every registered domain.

        Raises:
            DomainNotFoundError: If the name matches no registered domain
            AmbiguousDomainError: If strict_names and several domains match
        """
        if not isinstance(name_or_domain, str):
            return name_or_domain

        wanted = name_or_domain.lower()
        matches = [d.id for d in self._domains.values() if d.name.lower() == wanted]

        if not matches:
            raise DomainNotFoundError(name_or_domain)

        if len(matches) > 1:
            if self.strict_names:
                raise AmbiguousDomainError(name_or_domain, matches)
            logger.warning(
                f"Domain name {name_or_domain!r} is shared, using first match",
                extra={"context": {"domain_name": name_or_domain, "domain_ids": matches}},
            )

        return matches[0]

    def known_domain(self, name_or_domain: NameOrDomain) -> bool:
        """True if resolve_domain() would succeed for this reference."""
        try:
            self.resolve_domain(name_or_domain)
        except (DomainNotFoundError, AmbiguousDomainError):
            return False
        return True

    def get_domain(self, name_or_domain: NameOrDomain) -> Optional[Domain]:
        return self._domains.get(self.resolve_domain(name_or_domain))

    def must_get_domain(self, name_or_domain: NameOrDomain) -> Domain:
        domain = self.get_domain(name_or_domain)
        if domain is None:
            raise NotFoundError("Domain", name_or_domain)
        return domain

    def resolve_domain_name(self, name_or_domain: NameOrDomain) -> Optional[str]:
        """Name of the registered domain, or None when it is not registered."""
        domain = self.get_domain(name_or_domain)
        return domain.name if domain is not None else None

    def must_resolve_domain_name(self, name_or_domain: NameOrDomain) -> str:
        return self.must_get_domain(name_or_domain).name

    @property
    def domain_numbers(self) -> list[int]:
        """All registered ids, in registration order."""
        return list(self._domains.keys())

    @property
    def domain_names(self) -> list[str]:
        return [d.name for d in self._domains.values()]

    @property
    def domains(self) -> list[Domain]:
        return list(self._domains.values())

    def remote_domain_numbers(self, domain: int) -> list[int]:
        """Every registered id except `domain`."""
        return [d for d in self.domain_numbers if d != domain]
