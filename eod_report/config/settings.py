from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    debug: bool = False
    cors_origins: list[str] = ["http://localhost:3000"]

    # GitHub - token is optional; without it only public data is visible
    github_token: str = ""
    github_api_url: str = "https://api.github.com"
    # Search results are never paginated past the first page
    github_per_page: int = 100
    github_timeout: float = 30.0
    github_connect_timeout: float = 5.0
    # Connection pool of the shared client
    github_max_connections: int = 20
    github_max_keepalive_connections: int = 10
    # Fixed deadline for per-event sub-lookups (linked PRs, issue events)
    github_lookup_timeout: float = 10.0

    # Report synthesis
    # 1 keeps per-event sub-lookups strictly sequential
    max_concurrent_lookups: int = 1
    default_timezone: str = "UTC"


settings = Settings()
