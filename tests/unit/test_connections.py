"""
tests/unit/test_connections.py - Provider/signer registry tests.
"""

import pytest

from chains.connections import ConnectionRegistry, RebindStatus, rebind
from chains.domains import DomainDirectory
from core.constants import ConnectionKind
from core.exceptions import (
    ConnectionNotFoundError,
    DomainNotFoundError,
    InvariantViolationError,
    MissingProviderError,
    NotFoundError,
    SignerHasNoProviderError,
)


@pytest.fixture
def registry(domains):
    directory = DomainDirectory()
    for domain in domains:
        directory.register_domain(domain)
    return ConnectionRegistry(directory)


class TestRebind:
    def test_bound(self, make_signer, make_provider):
        p1, p2 = make_provider("p1"), make_provider("p2")
        result = rebind(make_signer("rebinding", p1), p2)

        assert result.status == RebindStatus.BOUND
        assert result.bound
        assert result.signer.provider is p2

    def test_no_connect_is_unsupported(self, make_signer, make_provider):
        result = rebind(make_signer("fixed", make_provider("p1")), make_provider("p2"))

        assert result.status == RebindStatus.UNSUPPORTED
        assert result.signer is None

    def test_can_connect_false_is_unsupported(self, make_signer, make_provider):
        result = rebind(make_signer("locked", make_provider("p1")), make_provider("p2"))

        assert result.status == RebindStatus.UNSUPPORTED

    def test_not_implemented_is_unsupported(self, make_signer, make_provider):
        result = rebind(make_signer("abstract", make_provider("p1")), make_provider("p2"))

        assert result.status == RebindStatus.UNSUPPORTED
        assert result.signer is None

    def test_detached_result_is_invalid(self, make_signer, make_provider):
        result = rebind(make_signer("invalid", make_provider("p1")), make_provider("p2"))

        assert result.status == RebindStatus.INVALID
        assert not result.bound

    def test_connect_errors_propagate(self, make_provider):
        class ExplodingSigner:
            provider = None

            def connect(self, provider):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            rebind(ExplodingSigner(), make_provider("p"))


class TestRegisterProvider:
    def test_last_write_wins(self, registry, make_provider):
        p1, p2 = make_provider("p1"), make_provider("p2")
        registry.register_provider(1, p1)
        registry.register_provider(1, p2)

        assert registry.get_provider(1) is p2

    def test_by_name(self, registry, make_provider):
        p = make_provider("p")
        registry.register_provider("ALPHA", p)

        assert registry.get_provider(1) is p

    def test_unknown_name(self, registry, make_provider):
        with pytest.raises(DomainNotFoundError):
            registry.register_provider("delta", make_provider("p"))

    def test_unregistered_id(self, registry, make_provider):
        with pytest.raises(NotFoundError) as exc_info:
            registry.register_provider(99, make_provider("p"))

        assert exc_info.value.kind == "Domain"

    def test_rebinds_existing_signer(self, registry, make_signer, make_provider):
        p1, p2 = make_provider("p1"), make_provider("p2")
        registry.register_provider(1, p1)
        registry.register_signer(1, make_signer("rebinding"))

        registry.register_provider(1, p2)

        assert registry.get_signer(1).provider is p2
        assert registry.get_provider(1) is p2

    @pytest.mark.parametrize("kind", ["fixed", "locked", "invalid", "abstract"])
    def test_drops_signer_that_cannot_follow(self, registry, make_signer, make_provider, kind):
        p1, p2 = make_provider("p1"), make_provider("p2")
        registry.register_signer(1, make_signer(kind, p1))

        registry.register_provider(1, p2)

        assert registry.get_signer(1) is None
        assert registry.get_provider(1) is p2


class TestRegisterSigner:
    def test_missing_provider(self, registry, make_signer):
        with pytest.raises(MissingProviderError):
            registry.register_signer(1, make_signer("rebinding"))

        assert registry.get_signer(1) is None

    def test_bound_to_registered_provider(self, registry, make_signer, make_provider):
        p_registry, p_signer = make_provider("registry"), make_provider("signer")
        registry.register_provider(1, p_registry)

        registry.register_signer(1, make_signer("rebinding", p_signer))

        # The registry decides which provider the domain uses
        assert registry.get_signer(1).provider is p_registry
        assert registry.get_provider(1) is p_registry

    def test_own_provider_adopted(self, registry, make_signer, make_provider):
        p = make_provider("p")
        signer = make_signer("fixed", p)

        registry.register_signer(2, signer)

        assert registry.get_provider(2) is p
        assert registry.get_signer(2) is signer

    def test_fallback_when_rebind_unsupported(self, registry, make_signer, make_provider):
        p_registry, p_signer = make_provider("registry"), make_provider("signer")
        registry.register_provider(1, p_registry)
        signer = make_signer("fixed", p_signer)

        registry.register_signer(1, signer)

        assert registry.get_signer(1) is signer
        assert registry.get_provider(1) is p_signer

    def test_fallback_when_connect_not_implemented(self, registry, make_signer, make_provider):
        p_registry, p_signer = make_provider("registry"), make_provider("signer")
        registry.register_provider(1, p_registry)
        signer = make_signer("abstract", p_signer)

        registry.register_signer(1, signer)

        assert registry.get_signer(1) is signer
        assert registry.get_provider(1) is p_signer

    def test_fallback_without_own_provider(self, registry, make_signer, make_provider):
        registry.register_provider(1, make_provider("p"))

        with pytest.raises(SignerHasNoProviderError):
            registry.register_signer(1, make_signer("fixed"))

        assert registry.get_signer(1) is None

    def test_invalid_rebind_without_own_provider(self, registry, make_signer, make_provider):
        registry.register_provider(1, make_provider("p"))

        with pytest.raises(SignerHasNoProviderError):
            registry.register_signer(1, make_signer("invalid"))

    def test_own_provider_on_unregistered_id(self, registry, make_signer, make_provider):
        with pytest.raises(NotFoundError):
            registry.register_signer(99, make_signer("fixed", make_provider("p")))

        assert registry.get_signer(99) is None

    def test_replaces_previous_signer(self, registry, make_signer, make_provider):
        registry.register_provider(1, make_provider("p"))
        registry.register_signer(1, make_signer("rebinding", address="0x01"))
        registry.register_signer(1, make_signer("rebinding", address="0x02"))

        assert registry.get_signer(1).address == "0x02"


class TestUnregisterSigner:
    def test_noop_without_signer(self, registry, make_provider):
        p = make_provider("p")
        registry.register_provider(1, p)

        registry.unregister_signer(1)

        assert registry.get_provider(1) is p
        assert registry.get_signer(1) is None

    def test_keeps_registered_provider(self, registry, make_signer, make_provider):
        p = make_provider("p")
        registry.register_provider(1, p)
        registry.register_signer(1, make_signer("rebinding"))

        registry.unregister_signer("alpha")

        assert registry.get_signer(1) is None
        assert registry.get_provider(1) is p

    def test_promotes_signer_provider(self, registry, make_signer, make_provider):
        p = make_provider("p")
        registry.register_signer(1, make_signer("fixed", p))
        # No public call leaves a signer without a domain provider
        registry._providers.clear()

        registry.unregister_signer(1)

        assert registry.get_signer(1) is None
        assert registry.get_provider(1) is p

    def test_signer_without_provider_is_invariant_violation(self, registry, make_signer, make_provider):
        registry.register_provider(1, make_provider("p"))
        registry.register_signer(1, make_signer("rebinding"))
        registry._signers[1].provider = None

        with pytest.raises(InvariantViolationError):
            registry.unregister_signer(1)

    def test_clear_signers(self, registry, make_signer, make_provider):
        p1, p3 = make_provider("p1"), make_provider("p3")
        registry.register_provider(1, p1)
        registry.register_signer(1, make_signer("rebinding"))
        registry.register_signer(3, make_signer("fixed", p3))
        # Same unreachable state as above, for domain 3 only
        registry._providers.pop(3)

        registry.clear_signers()

        for domain_id in (1, 2, 3):
            assert registry.get_signer(domain_id) is None
        assert registry.get_provider(1) is p1
        assert registry.get_provider(3) is p3
        assert registry.get_provider(2) is None


class TestConnections:
    def test_signer_preferred(self, registry, make_signer, make_provider):
        registry.register_provider(1, make_provider("p"))
        registry.register_signer(1, make_signer("rebinding"))

        assert registry.get_connection(1) is registry.get_signer(1)
        assert registry.connection_kind(1) == ConnectionKind.SIGNER

    def test_provider_when_no_signer(self, registry, make_provider):
        p = make_provider("p")
        registry.register_provider(1, p)

        assert registry.get_connection("alpha") is p
        assert registry.connection_kind(1) == ConnectionKind.PROVIDER

    def test_none_when_empty(self, registry):
        assert registry.get_connection(1) is None
        assert registry.connection_kind(1) == ConnectionKind.NONE

        with pytest.raises(ConnectionNotFoundError):
            registry.must_get_connection(1)

    def test_must_get_lookups(self, registry):
        with pytest.raises(NotFoundError) as exc_info:
            registry.must_get_provider(1)
        assert exc_info.value.kind == "Provider"

        with pytest.raises(NotFoundError) as exc_info:
            registry.must_get_signer(1)
        assert exc_info.value.kind == "Signer"

    def test_missing_providers(self, registry, make_provider):
        registry.register_provider(2, make_provider("p"))

        assert registry.missing_providers == [1, 3]

    @pytest.mark.asyncio
    async def test_get_address(self, registry, make_signer, make_provider):
        registry.register_provider(1, make_provider("p"))
        registry.register_signer(1, make_signer("rebinding", address="0xabc"))

        assert await registry.get_address("alpha") == "0xabc"

    @pytest.mark.asyncio
    async def test_get_address_without_signer(self, registry):
        assert await registry.get_address(1) is None

    @pytest.mark.asyncio
    async def test_get_address_failure_propagates(self, registry, make_provider):
        class FailingSigner:
            def __init__(self, provider):
                self.provider = provider

            async def get_address(self):
                raise ConnectionError("node down")

        registry.register_signer(1, FailingSigner(make_provider("p")))

        with pytest.raises(ConnectionError):
            await registry.get_address(1)
