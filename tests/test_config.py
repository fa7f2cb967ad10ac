from pathlib import Path

from namesdao_wallet.shared.config import (
    DEFAULT_API_BASE,
    DEFAULT_POLL_INTERVAL_SECONDS,
    NamesdaoConfig,
    normalize_api_base,
    resolve_storage_dir,
)


class TestNormalizeApiBase:
    def test_empty_uses_default(self):
        assert normalize_api_base(None) == DEFAULT_API_BASE
        assert normalize_api_base("   ") == DEFAULT_API_BASE

    def test_adds_scheme(self):
        assert normalize_api_base("api.example.org/") == "https://api.example.org"

    def test_keeps_scheme_and_strips_slash(self):
        assert normalize_api_base("http://localhost:8080/") == "http://localhost:8080"


class TestResolveStorageDir:
    def test_explicit_dir_wins(self, tmp_path):
        assert resolve_storage_dir(tmp_path) == tmp_path

    def test_environment_dir(self, monkeypatch, tmp_path):
        monkeypatch.setenv("NAMESDAO_WALLET_DIR", str(tmp_path))
        assert resolve_storage_dir() == tmp_path

    def test_home_fallback(self, monkeypatch):
        monkeypatch.delenv("NAMESDAO_WALLET_DIR", raising=False)
        assert resolve_storage_dir() == Path.home() / ".config" / "namesdao-wallet"


class TestNamesdaoConfig:
    def test_defaults(self):
        config = NamesdaoConfig()
        assert config.api_base_url == DEFAULT_API_BASE
        assert config.poll_interval_seconds == DEFAULT_POLL_INTERVAL_SECONDS
        assert config.pricing_retry_config.max_attempts == 3
        assert config.registrar_public_key is None

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("NAMESDAO_API_BASE", "registrar.example.org")
        monkeypatch.setenv("NAMESDAO_REGISTRAR_PUBKEY", "PEM")
        monkeypatch.setenv("NAMESDAO_POLL_INTERVAL", "3")
        monkeypatch.setenv("NAMESDAO_WALLET_DIR", str(tmp_path))

        config = NamesdaoConfig.from_environment()

        assert config.api_base_url == "https://registrar.example.org"
        assert config.registrar_public_key == "PEM"
        assert config.poll_interval_seconds == 3.0
        assert config.storage_dir == tmp_path

    def test_invalid_poll_interval_is_ignored(self, monkeypatch):
        monkeypatch.setenv("NAMESDAO_POLL_INTERVAL", "soon")
        config = NamesdaoConfig.from_environment()
        assert config.poll_interval_seconds == DEFAULT_POLL_INTERVAL_SECONDS
