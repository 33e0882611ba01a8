from __future__ import annotations

from monitor.tests.fixtures.chain import FakeChainClient
from vigil_commons.config.chain import ChainSettings
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor.infrastructure.chain.client import RuntimeChainClient


def test_runtime_client_builds_delegate_lazily(token: CancellationToken) -> None:
    created: list[FakeChainClient] = []

    def factory(settings: ChainSettings) -> FakeChainClient:
        client = FakeChainClient(height=42, chain_names=["Ethereum"])
        created.append(client)
        return client

    client = RuntimeChainClient(ChainSettings(), client_factory=factory)

    assert created == []
    assert client.latest_height(token) == 42
    assert list(client.chains(token)) == ["Ethereum"]
    assert len(created) == 1


def test_runtime_client_close_resets_delegate(token: CancellationToken) -> None:
    created: list[FakeChainClient] = []

    def factory(settings: ChainSettings) -> FakeChainClient:
        created.append(FakeChainClient())
        return created[-1]

    client = RuntimeChainClient(ChainSettings(), client_factory=factory)
    client.close()
    assert created == []

    client.transactions(10, token)
    client.close()
    client.transactions(11, token)

    assert created[0].closed is True
    assert len(created) == 2
