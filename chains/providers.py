"""
chains/providers.py - JSON-RPC provider and signer handles.

Concrete handles the registry can hold:
- RPCProvider: JSON-RPC over httpx with multiple endpoint failover
- RPCSigner: account managed by the node behind an RPCProvider

Nothing here is touched by the registry itself; network I/O only happens
when a caller uses a handle.
"""

import os
import re
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx
from dotenv import load_dotenv

from core.constants import DEFAULT_RPC_MAX_CONNECTIONS, DEFAULT_RPC_TIMEOUT_SECONDS
from core.exceptions import ErrorCode, InfraError
from core.logging import get_logger

logger = get_logger(__name__)

# Load environment variables (API keys referenced from RPC URLs)
load_dotenv()

_ENV_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


def resolve_rpc_url(url: str) -> Optional[str]:
    """
    Substitute ${VAR} placeholders from the environment.

    Returns None when a referenced variable is unset or empty, so endpoints
    that need a missing API key are skipped instead of called.
    """
    missing = []

    def _sub(match: re.Match) -> str:
        value = os.getenv(match.group(1), "")
        if not value:
            missing.append(match.group(1))
        return value

    resolved = _ENV_PLACEHOLDER.sub(_sub, url)
    if missing:
        logger.debug(
            "Skipping RPC endpoint with unset variables",
            extra={"context": {"missing": missing}},
        )
        return None
    return resolved


@dataclass
class RPCStats:
    """Statistics for an RPC endpoint."""
    url: str
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    total_latency_ms: int = 0
    last_error: str | None = None

    @property
    def avg_latency_ms(self) -> int:
        if self.successful_requests == 0:
            return 0
        return self.total_latency_ms // self.successful_requests

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.successful_requests / self.total_requests


@dataclass
class RPCResponse:
    """Response from an RPC call."""
    result: Any
    latency_ms: int
    endpoint_used: str


class RPCProvider:
    """
    RPC provider with failover support.

    Tries endpoints in order until one succeeds and tracks statistics per
    endpoint. The HTTP client is created on first call.
    """

    def __init__(
        self,
        domain_id: int,
        rpc_urls: Union[str, list[str]],
        timeout_seconds: int = DEFAULT_RPC_TIMEOUT_SECONDS,
    ):
        if isinstance(rpc_urls, str):
            rpc_urls = [rpc_urls]

        self.domain_id = domain_id
        self.timeout_seconds = timeout_seconds
        self._client: httpx.AsyncClient | None = None
        self._request_id = 0

        self.rpc_urls = [u for u in (resolve_rpc_url(url) for url in rpc_urls) if u]
        self.stats: dict[str, RPCStats] = {
            url: RPCStats(url=url) for url in self.rpc_urls
        }

    def __repr__(self) -> str:
        return f"RPCProvider(domain_id={self.domain_id}, endpoints={len(self.rpc_urls)})"

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                limits=httpx.Limits(max_connections=DEFAULT_RPC_MAX_CONNECTIONS),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _next_request_id(self) -> int:
        self._request_id += 1
        return self._request_id

    async def call(
        self,
        method: str,
        params: list | None = None,
    ) -> RPCResponse:
        """
        Make an RPC call with failover.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPCResponse with result and metadata

        Raises:
            InfraError: If no endpoint is configured or all endpoints fail
        """
        if not self.rpc_urls:
            raise InfraError(
                "No RPC endpoints configured",
                details={"domain_id": self.domain_id},
            )

        client = await self._get_client()
        last_error: str | None = None

        for url in self.rpc_urls:
            stats = self.stats[url]
            stats.total_requests += 1

            payload = {
                "jsonrpc": "2.0",
                "method": method,
                "params": params or [],
                "id": self._next_request_id(),
            }

            start_ms = int(time.time() * 1000)

            try:
                resp = await client.post(url, json=payload)
                resp.raise_for_status()
                result = resp.json()
            except httpx.TimeoutException:
                latency_ms = int(time.time() * 1000) - start_ms
                stats.failed_requests += 1
                stats.last_error = last_error = f"Timeout after {latency_ms}ms"
                logger.debug(f"RPC timeout for {url}: {latency_ms}ms")
                continue
            except (httpx.HTTPError, ValueError) as e:
                stats.failed_requests += 1
                stats.last_error = last_error = str(e)
                logger.debug(f"RPC failed for {url}: {e}")
                continue

            latency_ms = int(time.time() * 1000) - start_ms

            if "error" in result:
                error_msg = result["error"].get("message", str(result["error"]))
                stats.failed_requests += 1
                stats.last_error = last_error = error_msg
                logger.debug(f"RPC error from {url}: {error_msg}")
                continue

            stats.successful_requests += 1
            stats.total_latency_ms += latency_ms

            return RPCResponse(
                result=result.get("result"),
                latency_ms=latency_ms,
                endpoint_used=url,
            )

        raise InfraError(
            f"All RPC endpoints failed for domain {self.domain_id}",
            code=ErrorCode.INFRA_RPC_ERROR,
            details={
                "domain_id": self.domain_id,
                "method": method,
                "endpoints_tried": len(self.rpc_urls),
                "last_error": last_error,
            },
        )

    async def get_chain_id(self) -> int:
        response = await self.call("eth_chainId")
        return int(response.result, 16)

    async def get_block_number(self) -> int:
        response = await self.call("eth_blockNumber")
        return int(response.result, 16)

    async def get_accounts(self) -> list[str]:
        """Accounts the node manages (eth_accounts)."""
        response = await self.call("eth_accounts")
        return list(response.result or [])

    def get_stats_summary(self) -> dict:
        return {
            url: {
                "total_requests": s.total_requests,
                "success_rate": round(s.success_rate, 3),
                "avg_latency_ms": s.avg_latency_ms,
                "last_error": s.last_error,
            }
            for url, s in self.stats.items()
        }


class RPCSigner:
    """
    Signer for an account unlocked on the node behind an RPCProvider.

    The account lives on that node, so the signer cannot be moved to a
    different provider: it has no connect().
    """

    def __init__(
        self,
        provider: RPCProvider,
        address: str | None = None,
        index: int = 0,
    ):
        self.provider = provider
        self.index = index
        self._address = address

    def __repr__(self) -> str:
        return f"RPCSigner(address={self._address}, index={self.index})"

    async def get_address(self) -> str:
        """
        Address of the account.

        Uses the configured address, else eth_accounts[index] (cached).

        Raises:
            InfraError: If the node does not expose enough accounts
        """
        if self._address is not None:
            return self._address

        accounts = await self.provider.get_accounts()
        if self.index >= len(accounts):
            raise InfraError(
                f"Node exposes {len(accounts)} accounts, wanted index {self.index}",
                details={"domain_id": self.provider.domain_id, "index": self.index},
            )

        self._address = accounts[self.index]
        return self._address
