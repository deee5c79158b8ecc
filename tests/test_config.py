from __future__ import annotations

import pytest

from pybustrack.config import TrackerConfig
from pybustrack.exceptions import BusTrackConfigError


def test_defaults_match_sampling_cadence() -> None:
    config = TrackerConfig()
    assert config.interval_for("driver") == 10.0
    assert config.interval_for("commuter") == 30.0
    assert config.fix_timeout == 5.0
    assert config.eta_path is None
    assert config.resubscribe_on_reconnect


def test_base_url_trailing_slash_is_stripped() -> None:
    assert TrackerConfig(base_url=" https://track.example.org/ ").base_url == "https://track.example.org"


@pytest.mark.parametrize("field", ["driver_interval", "commuter_interval", "fix_timeout", "http_timeout"])
def test_non_positive_durations_rejected(field: str) -> None:
    with pytest.raises(BusTrackConfigError):
        TrackerConfig(**{field: 0})


@pytest.mark.parametrize("value", [float("nan"), float("inf"), -1.0])
@pytest.mark.parametrize("field", ["driver_interval", "commuter_interval", "fix_timeout", "http_timeout"])
def test_non_finite_durations_rejected(field: str, value: float) -> None:
    with pytest.raises(BusTrackConfigError, match=field):
        TrackerConfig(**{field: value})


def test_reconnection_delay_must_be_finite() -> None:
    assert TrackerConfig(reconnection_delay=0).reconnection_delay == 0
    with pytest.raises(BusTrackConfigError):
        TrackerConfig(reconnection_delay=float("nan"))
    with pytest.raises(BusTrackConfigError):
        TrackerConfig(reconnection_delay=-1.0)


def test_blank_base_url_rejected() -> None:
    with pytest.raises(BusTrackConfigError):
        TrackerConfig(base_url="  ")


def test_from_env_reads_variables(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSTRACK_BASE_URL", "https://track.example.org/")
    monkeypatch.setenv("BUSTRACK_ETA_PATH", "/api/locations/route")
    monkeypatch.setenv("BUSTRACK_DRIVER_INTERVAL", "5")
    monkeypatch.setenv("BUSTRACK_RESUBSCRIBE", "off")

    config = TrackerConfig.from_env()

    assert config.base_url == "https://track.example.org"
    assert config.eta_path == "/api/locations/route"
    assert config.driver_interval == 5.0
    assert config.commuter_interval == 30.0
    assert not config.resubscribe_on_reconnect


def test_from_env_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSTRACK_COMMUTER_INTERVAL", "45")
    config = TrackerConfig.from_env(commuter_interval=12.0, resubscribe_on_reconnect=False)
    assert config.commuter_interval == 12.0
    assert not config.resubscribe_on_reconnect


def test_from_env_rejects_non_numeric(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSTRACK_FIX_TIMEOUT", "soon")
    with pytest.raises(BusTrackConfigError, match="BUSTRACK_FIX_TIMEOUT"):
        TrackerConfig.from_env()


def test_blank_eta_path_disables_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSTRACK_ETA_PATH", "  ")
    assert TrackerConfig.from_env().eta_path is None


def test_from_env_rejects_nan(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BUSTRACK_FIX_TIMEOUT", "nan")
    with pytest.raises(BusTrackConfigError, match="fix_timeout"):
        TrackerConfig.from_env()
