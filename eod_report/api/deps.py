from fastapi import Header

from eod_report.config import settings
from eod_report.services.github import GitHubActivityFetcher


def get_github_fetcher(
    x_github_token: str | None = Header(None),
) -> GitHubActivityFetcher:
    """
    Build a fetcher for this request.

    A token sent in the X-GitHub-Token header takes precedence over the
    configured one. Without any token only public data is visible.
    """
    return GitHubActivityFetcher(
        token=x_github_token or settings.github_token or None,
        base_url=settings.github_api_url,
        per_page=settings.github_per_page,
        timeout=settings.github_timeout,
        lookup_timeout=settings.github_lookup_timeout,
    )
