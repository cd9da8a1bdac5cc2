"""
chains/ - Domain directory and connection layer.

Modules:
- domains: domain registration and name/id resolution
- connections: provider/signer registry and rebinding
- policy: per-domain overrides and confirmations
- multi_provider: MultiProvider facade and config loading
- providers: JSON-RPC provider and signer handles
"""

from chains.connections import (
    ConnectionRegistry,
    RebindResult,
    RebindStatus,
    rebind,
)
from chains.domains import DomainDirectory
from chains.multi_provider import MultiProvider, load_multi_provider
from chains.policy import PolicyStore
from chains.providers import (
    RPCProvider,
    RPCResponse,
    RPCSigner,
    RPCStats,
)

__all__ = [
    # Registry
    "ConnectionRegistry",
    "DomainDirectory",
    "MultiProvider",
    "PolicyStore",
    "RebindResult",
    "RebindStatus",
    "load_multi_provider",
    "rebind",
    # Handles
    "RPCProvider",
    "RPCResponse",
    "RPCSigner",
    "RPCStats",
]
