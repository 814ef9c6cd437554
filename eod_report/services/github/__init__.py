"""
GitHub service package.

Usage: `from eod_report.services.github import GitHubActivityFetcher`

Module structure:
- read_operations.py: GitHubActivityFetcher (all API reads)
- queries.py: search query construction per activity stream
- helpers.py: Rate limit handling and error utilities
- http_client.py: shared httpx.AsyncClient
- exceptions.py: Custom exceptions
- constants.py: API constants
"""

from eod_report.services.github.exceptions import GitHubAPIError
from eod_report.services.github.helpers import RateLimitInfo, handle_error_response
from eod_report.services.github.http_client import close_github_client
from eod_report.services.github.queries import build_search_query
from eod_report.services.github.read_operations import GitHubActivityFetcher

__all__ = [
    "GitHubActivityFetcher",
    # HTTP client lifecycle
    "close_github_client",
    # Utilities
    "build_search_query",
    "handle_error_response",
    "RateLimitInfo",
    # Exceptions
    "GitHubAPIError",
]
