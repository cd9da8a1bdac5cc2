"""
Pytest configuration and fixtures for registry tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chains.multi_provider import MultiProvider  # noqa: E402
from core.models import Domain  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


class FakeProvider:
    """Provider handle; only identity matters to the registry."""

    def __init__(self, label: str):
        self.label = label

    def __repr__(self):
        return f"FakeProvider({self.label})"


class FixedSigner:
    """Signer without connect()."""

    def __init__(self, provider=None, address="0x00000000000000000000000000000000000000aa"):
        self.provider = provider
        self.address = address

    async def get_address(self):
        return self.address


class RebindingSigner(FixedSigner):
    """Signer whose connect() returns a copy on the new provider."""

    def connect(self, provider):
        return RebindingSigner(provider, self.address)


class LockedSigner(RebindingSigner):
    """Has connect() but reports that rebinding is not permitted."""

    can_connect = False


class InvalidRebindSigner(FixedSigner):
    """connect() hands back a signer that is not attached to the provider."""

    def connect(self, provider):
        return FixedSigner(None, self.address)


class AbstractSigner(FixedSigner):
    """connect() exists but is not implemented."""

    def connect(self, provider):
        raise NotImplementedError("connect")


SIGNER_KINDS = {
    "fixed": FixedSigner,
    "rebinding": RebindingSigner,
    "locked": LockedSigner,
    "invalid": InvalidRebindSigner,
    "abstract": AbstractSigner,
}


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def make_signer():
    def _make(kind="rebinding", provider=None, address="0x00000000000000000000000000000000000000aa"):
        return SIGNER_KINDS[kind](provider, address)
    return _make


@pytest.fixture
def domains():
    return [
        Domain(id=1, name="alpha"),
        Domain(id=2, name="beta"),
        Domain(id=3, name="gamma"),
    ]


@pytest.fixture
def mp(domains):
    """MultiProvider with alpha(1), beta(2), gamma(3) registered."""
    multi = MultiProvider()
    for domain in domains:
        multi.register_domain(domain)
    return multi
