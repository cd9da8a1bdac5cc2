"""
Core data models for the multi-domain registry.

A Domain is a registered network: a stable numeric id plus a human name.
Providers and signers are external handles; the registry only relies on
the small capability surface described by the protocols below.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union, runtime_checkable

# A domain reference: human name (case-insensitive) or canonical id
NameOrDomain = Union[str, int]

# Read connection to a domain's network; opaque, nothing is called on it
Provider = Any

# Opaque per-domain transaction parameters (gas_limit, max_fee_per_gas, ...)
TxOverrides = dict[str, Any]


@dataclass(frozen=True)
class Domain:
    """A registered network."""
    id: int
    name: str


@runtime_checkable
class Signer(Protocol):
    """
    Write-capable connection handle.

    `provider` is the provider the signer is attached to, or None.
    Signers that can be rebound also expose `connect(provider)` returning a
    new handle bound to that provider; they may set `can_connect = False`
    to advertise that rebinding is not permitted.
    """

    provider: Optional[Provider]

    async def get_address(self) -> str:
        ...
