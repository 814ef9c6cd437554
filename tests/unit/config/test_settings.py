"""Unit tests for environment-driven settings."""

from eod_report.config.settings import Settings


class TestSettings:
    """Tests for defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        s = Settings(_env_file=None)

        assert s.github_api_url == "https://api.github.com"
        assert s.github_per_page == 100
        assert s.max_concurrent_lookups == 1
        assert s.default_timezone == "UTC"
        assert s.github_token == ""
        assert s.github_connect_timeout == 5.0
        assert s.github_max_connections == 20

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
        monkeypatch.setenv("GITHUB_LOOKUP_TIMEOUT", "2.5")
        monkeypatch.setenv("MAX_CONCURRENT_LOOKUPS", "4")
        s = Settings(_env_file=None)

        assert s.github_token == "ghp_env"
        assert s.github_lookup_timeout == 2.5
        assert s.max_concurrent_lookups == 4

    def test_cors_origins_from_json(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.com"]')

        assert Settings(_env_file=None).cors_origins == ["https://app.example.com"]
