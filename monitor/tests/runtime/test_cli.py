from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from monitor.tests.fixtures.chain import FakeChainClient
from monitor.tests.fixtures.publishing import RecordingAlertSink
from monitor.tests.fixtures.wire import heartbeat_envelope, make_address
from vigil_commons.errors import CheckCancelledError
from vigil_commons.runtime.cancellation import CancellationToken
from vigil_monitor import cli
from vigil_monitor.runtime.bootstrap import build_runtime
from vigil_monitor.runtime.settings import HeartbeatSettings, IdentitySettings, Settings

BROADCASTER = make_address(1)
VALIDATOR = make_address(3)


def _install_runtime(monkeypatch: pytest.MonkeyPatch, chain: FakeChainClient) -> None:
    settings = Settings(
        identity=IdentitySettings(
            VIGIL_BROADCASTER_ADDRESS=BROADCASTER.to_bech32(),
            VIGIL_VALIDATOR_ADDRESS=VALIDATOR.to_bech32(),
        ),
        heartbeat=HeartbeatSettings(VIGIL_HEARTBEAT_CHECK_N=1),
    )
    monkeypatch.setattr(cli.Settings, "load", classmethod(lambda cls: settings))
    monkeypatch.setattr(cli, "configure_from_settings", lambda _: None)
    monkeypatch.setattr(
        cli,
        "build_runtime",
        lambda resolved: build_runtime(resolved, chain_client=chain, alerts=RecordingAlertSink()),
    )


def test_check_prints_report_and_exits_zero_when_healthy(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    chain = FakeChainClient(
        height=1234,
        blocks={1200: [heartbeat_envelope(BROADCASTER)]},
        chain_names=["Ethereum"],
        maintainers={"Ethereum": [VALIDATOR]},
    )
    _install_runtime(monkeypatch, chain)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check", "--timeout", "30"])

    assert excinfo.value.code == 0
    report = json.loads(capsys.readouterr().out)
    assert report["healthy"] is True
    assert report["heartbeat"]["missed"] == 0
    assert report["maintainers"]["per_chain"] == {"Ethereum": True}
    assert chain.closed is True


def test_check_exits_one_when_unhealthy(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    chain = FakeChainClient(height=1234, chain_names=["Ethereum"], maintainers={"Ethereum": []})
    _install_runtime(monkeypatch, chain)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check"])

    assert excinfo.value.code == 1
    report = json.loads(capsys.readouterr().out)
    assert report["heartbeat"]["missed"] == 1
    assert report["maintainers"]["status"] is False


@dataclass
class DeadlineChainClient(FakeChainClient):
    def latest_height(self, token: CancellationToken) -> int:
        raise CheckCancelledError("check deadline exceeded")


def test_check_exits_two_when_cycle_is_cancelled(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    chain = DeadlineChainClient()
    _install_runtime(monkeypatch, chain)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["check"])

    assert excinfo.value.code == 2
    assert json.loads(capsys.readouterr().out) == {"healthy": False, "errors": {"cycle": "check deadline exceeded"}}
    assert chain.closed is True
