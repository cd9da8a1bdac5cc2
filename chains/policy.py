"""
chains/policy.py - Per-domain transaction policy.

Overrides and confirmation counts by domain id, with defaults for any
domain that has none registered (registered in the directory or not).
"""

from collections.abc import Mapping
from typing import Any

from chains.domains import DomainDirectory
from core.constants import DEFAULT_CONFIRMATIONS
from core.exceptions import InvalidPolicyError
from core.logging import get_logger
from core.models import NameOrDomain, TxOverrides

logger = get_logger(__name__)


class PolicyStore:
    """Overrides and confirmations keyed by resolved domain id."""

    def __init__(self, directory: DomainDirectory):
        self._directory = directory
        self._overrides: dict[int, TxOverrides] = {}
        self._confirmations: dict[int, int] = {}

    def register_overrides(self, name_or_domain: NameOrDomain, overrides: Mapping[str, Any]) -> None:
        if not isinstance(overrides, Mapping):
            raise InvalidPolicyError(
                "Overrides must be a mapping",
                {"domain": name_or_domain, "type": type(overrides).__name__},
            )
        domain_id = self._directory.resolve_domain(name_or_domain)
        self._overrides[domain_id] = dict(overrides)
        logger.debug(
            "Overrides registered",
            extra={"context": {"domain_id": domain_id, "keys": sorted(overrides)}},
        )

    def get_overrides(self, name_or_domain: NameOrDomain) -> TxOverrides:
        """Copy of the registered overrides, or an empty dict."""
        overrides = self._overrides.get(self._directory.resolve_domain(name_or_domain))
        return dict(overrides) if overrides is not None else {}

    def register_confirmations(self, name_or_domain: NameOrDomain, confirmations: int) -> None:
        # bool is an int subclass but never a confirmation count
        if isinstance(confirmations, bool) or not isinstance(confirmations, int) or confirmations < 0:
            raise InvalidPolicyError(
                f"Confirmations must be a non-negative integer, got {confirmations!r}",
                {"domain": name_or_domain},
            )
        domain_id = self._directory.resolve_domain(name_or_domain)
        self._confirmations[domain_id] = confirmations
        logger.debug(
            "Confirmations registered",
            extra={"context": {"domain_id": domain_id, "confirmations": confirmations}},
        )

    def get_confirmations(self, name_or_domain: NameOrDomain) -> int:
        """Registered confirmations, or DEFAULT_CONFIRMATIONS."""
        return self._confirmations.get(
            self._directory.resolve_domain(name_or_domain),
            DEFAULT_CONFIRMATIONS,
        )
