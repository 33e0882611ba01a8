from __future__ import annotations

import pytest
from pydantic import ValidationError

from vigil_commons.config.chain import ChainSettings
from vigil_commons.config.external_client import ExternalClientRetrySettings
from vigil_commons.config.observability import ObservabilitySettings
from vigil_monitor.domain.address import KNOWN_RELAYER_ADDRESS
from vigil_monitor.runtime.settings import HeartbeatSettings, IdentitySettings, Settings


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("VIGIL_HEARTBEAT_SOURCE", "VIGIL_HEARTBEAT_CHECK_N", "VIGIL_FALLBACK_ADDRESSES", "VIGIL_PORT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings()

    assert settings.http_port == 8300
    assert settings.heartbeat.source == "chain-scan"
    assert settings.heartbeat.window_length == 50
    assert settings.heartbeat.check_n == 5
    assert settings.heartbeat.try_count == 5
    assert settings.heartbeat.miss_threshold == 3
    assert settings.identity.fallback_address_list == (KNOWN_RELAYER_ADDRESS,)


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIGIL_RPC_URL", "http://node:26657/")
    monkeypatch.setenv("VIGIL_HEARTBEAT_SOURCE", " Indexer ")
    monkeypatch.setenv("VIGIL_HEARTBEAT_MISS_THRESHOLD", "2")
    monkeypatch.setenv("VIGIL_EXCEPT_CHAINS", "Moonbeam, , Fantom")

    settings = Settings()

    assert settings.chain.rpc_url == "http://node:26657"
    assert settings.heartbeat.source == "indexer"
    assert settings.heartbeat.miss_threshold == 2
    assert settings.identity.except_chain_names == ("moonbeam", "fantom")


def test_heartbeat_settings_reject_unknown_source() -> None:
    with pytest.raises(ValidationError):
        HeartbeatSettings(VIGIL_HEARTBEAT_SOURCE="rumour")


def test_heartbeat_settings_reject_zero_window() -> None:
    with pytest.raises(ValidationError):
        HeartbeatSettings(VIGIL_HEARTBEAT_WINDOW=0)


def test_chain_settings_reject_blank_url() -> None:
    with pytest.raises(ValidationError):
        ChainSettings(VIGIL_LCD_URL="  /")


def test_identity_fallback_list_can_be_cleared() -> None:
    assert IdentitySettings(VIGIL_FALLBACK_ADDRESSES="").fallback_address_list == ()


def test_retry_settings_build_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIGIL_RETRY_ATTEMPTS", "4")
    monkeypatch.setenv("VIGIL_RETRY_INITIAL_MS", "100")
    monkeypatch.setenv("VIGIL_RETRY_MAX_MS", "800")

    policy = Settings().retry.retry_policy

    assert (policy.attempts, policy.initial_ms, policy.max_ms) == (4, 100, 800)


def test_retry_settings_reject_inverted_bounds() -> None:
    with pytest.raises(ValidationError):
        ExternalClientRetrySettings(VIGIL_RETRY_INITIAL_MS=1000, VIGIL_RETRY_MAX_MS=10)


def test_cloud_logging_requires_project(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GCP_PROJECT_ID", raising=False)

    with pytest.raises(ValidationError):
        ObservabilitySettings(ENABLE_CLOUD_LOGGING=True)


def test_metrics_namespace_must_be_a_metric_prefix() -> None:
    with pytest.raises(ValidationError):
        ObservabilitySettings(VIGIL_METRICS_NAMESPACE="vigil-monitor")
