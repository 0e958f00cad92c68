"""
Tests for listing_signals.config and listing_signals.core.settings.

Covers:
  • env parsing helpers
  • AnalysisSettings defaults, overrides and channel probe order
  • from_env picks up the jitter knobs
"""

import dataclasses

import pytest

from listing_signals import config
from listing_signals.core.settings import DEFAULT_SETTINGS, AnalysisSettings, resolve


class TestEnvHelpers:
    @pytest.mark.parametrize("raw, expected", [
        ("1", True), ("true", True), (" YES ", True), ("on", True),
        ("0", False), ("false", False), ("nah", False),
    ])
    def test_env_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("LS_TEST_FLAG", raw)
        assert config._env_bool("LS_TEST_FLAG") is expected

    def test_env_bool_default(self, monkeypatch):
        monkeypatch.delenv("LS_TEST_FLAG", raising=False)
        assert config._env_bool("LS_TEST_FLAG", True) is True

    def test_env_optional_int(self, monkeypatch):
        monkeypatch.setenv("LS_TEST_SEED", "42")
        assert config._env_optional_int("LS_TEST_SEED") == 42
        monkeypatch.setenv("LS_TEST_SEED", "")
        assert config._env_optional_int("LS_TEST_SEED") is None


class TestAnalysisSettings:
    def test_defaults(self):
        s = AnalysisSettings()
        assert s.rank_good_threshold == 50_000
        assert s.rank_fair_threshold == 100_000
        assert s.trend_change_threshold == pytest.approx(0.05)
        assert s.price_default_stability == pytest.approx(0.65)
        assert s.price_jitter_enabled is True
        assert s.jitter_seed is None

    def test_channel_probe_order(self):
        assert DEFAULT_SETTINGS.price_channel_candidates == (0, 1, 2, 16)

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_SETTINGS.rank_good_threshold = 1

    def test_resolve(self):
        custom = dataclasses.replace(DEFAULT_SETTINGS, rank_good_threshold=1)
        assert resolve(None) is DEFAULT_SETTINGS
        assert resolve(custom) is custom

    def test_from_env(self, monkeypatch):
        monkeypatch.setattr(config, "PRICE_JITTER_ENABLED", False)
        monkeypatch.setattr(config, "PRICE_JITTER_SEED", 9)
        s = AnalysisSettings.from_env()
        assert s.price_jitter_enabled is False
        assert s.jitter_seed == 9
