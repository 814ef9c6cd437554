"""
GitHub API read operations.

Implements the activity fetcher boundary over the GitHub REST API:
- Per-stream search queries (first page only)
- Issue event history, commit -> pull request and issue -> pull request lookups
- User organizations
- Repository-scoped listings for exports
"""

import logging
from datetime import UTC
from typing import Any

import httpx

from eod_report.services.activity.types import ActivityKind, ActivityScope, DateRange
from eod_report.services.github.constants import (
    API_VERSION,
    CROSS_REFERENCED_EVENT,
    MAX_PER_PAGE,
    REPOSITORY_STREAMS,
)
from eod_report.services.github.exceptions import GitHubAPIError
from eod_report.services.github.helpers import handle_error_response
from eod_report.services.github.http_client import get_github_client
from eod_report.services.github.queries import build_search_query, search_endpoint

logger = logging.getLogger(__name__)


class GitHubActivityFetcher:
    """
    Read-only access to a user's GitHub activity.

    Without a token only public data is visible. Every failure, including
    timeouts and transport errors, surfaces as GitHubAPIError.

    Uses the shared HTTP client singleton for connection pooling.
    """

    BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        per_page: int = MAX_PER_PAGE,
        timeout: float = 30.0,
        lookup_timeout: float = 10.0,
    ):
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.per_page = min(per_page, MAX_PER_PAGE)
        self.timeout = timeout
        self.lookup_timeout = lookup_timeout
        self.authenticated = bool(token)
        self._headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": API_VERSION,
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    async def _get(
        self,
        url: str,
        resource: str,
        params: dict[str, str | int] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """GET a URL and return the decoded JSON body."""
        client = get_github_client()
        try:
            response = await client.get(
                url,
                headers=self._headers,
                params=params,
                timeout=timeout or self.timeout,
            )
        except httpx.TimeoutException as e:
            raise GitHubAPIError(f"Timed out fetching {resource}") from e
        except httpx.RequestError as e:
            raise GitHubAPIError(f"Request failed for {resource}: {e}") from e

        handle_error_response(response, resource)
        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from {resource}", response.status_code) from e

    # ------------------------------------------------------------------
    # Activity streams
    # ------------------------------------------------------------------

    async def fetch(
        self, kind: ActivityKind, scope: ActivityScope, date_range: DateRange
    ) -> list[dict[str, Any]]:
        """
        Run the search query for one activity stream.

        Only the first page is requested; deeper results are never fetched.

        Returns:
            Raw search items in upstream order
        """
        query = build_search_query(kind, scope, date_range)
        data = await self._get(
            f"{self.base_url}{search_endpoint(kind)}",
            resource=f"{kind.value} search",
            params={"q": query, "per_page": self.per_page},
        )
        if data.get("incomplete_results"):
            logger.info(f"Search for {kind.value} returned incomplete results")
        items: list[dict[str, Any]] = data.get("items", [])
        logger.debug(f"{kind.value}: {len(items)} items for query {query!r}")
        return items

    async def fetch_event_history(self, events_url: str) -> list[dict[str, Any]]:
        """Fetch the lifecycle events of an issue (assigned, closed, ...)."""
        events: list[dict[str, Any]] = await self._get(
            events_url,
            resource="issue events",
            params={"per_page": MAX_PER_PAGE},
            timeout=self.lookup_timeout,
        )
        return events

    async def fetch_commit_pull_requests(self, commit_url: str) -> list[dict[str, Any]]:
        """Fetch the pull requests associated with a commit."""
        pulls: list[dict[str, Any]] = await self._get(
            f"{commit_url}/pulls",
            resource="commit pull requests",
            timeout=self.lookup_timeout,
        )
        return pulls

    async def fetch_issue_linked_pull_requests(self, issue_url: str) -> list[dict[str, Any]]:
        """
        Fetch pull requests that reference an issue.

        Reads the issue timeline and keeps cross-references whose source is a
        pull request.

        Args:
            issue_url: Issue API URL (``.../repos/{owner}/{repo}/issues/{n}``)
        """
        timeline: list[dict[str, Any]] = await self._get(
            f"{issue_url}/timeline",
            resource="issue timeline",
            params={"per_page": MAX_PER_PAGE},
            timeout=self.lookup_timeout,
        )
        linked: list[dict[str, Any]] = []
        for event in timeline:
            if event.get("event") != CROSS_REFERENCED_EVENT:
                continue
            source = (event.get("source") or {}).get("issue") or {}
            if source.get("pull_request"):
                linked.append(source)
        return linked

    # ------------------------------------------------------------------
    # Users and repositories
    # ------------------------------------------------------------------

    async def list_organizations(self, username: str) -> list[str]:
        """
        List organization logins for a user.

        Public memberships always; with a token, the authenticated user's
        private memberships are merged in (deduplicated, order preserved).
        """
        public = await self._get(
            f"{self.base_url}/users/{username}/orgs", resource=f"organizations of {username}"
        )
        logins = [org["login"] for org in public]

        if self.authenticated:
            try:
                private = await self._get(
                    f"{self.base_url}/user/orgs", resource="user organizations"
                )
                logins.extend(org["login"] for org in private)
            except GitHubAPIError as e:
                logger.info(f"Could not fetch private organizations: {e.message}")

        return list(dict.fromkeys(logins))

    async def list_repository_items(
        self,
        owner: str,
        repo: str,
        stream: str,
        state: str = "all",
        date_range: DateRange | None = None,
    ) -> list[dict[str, Any]]:
        """
        List one stream of a repository (first page only).

        "merged" is not an upstream state: pull requests are requested as
        "closed" and the caller filters on ``merged_at``.

        Args:
            stream: One of REPOSITORY_STREAMS
            state: "all", "open", "closed" or "merged"
            date_range: Passed upstream for commits only
        """
        path = REPOSITORY_STREAMS[stream]
        params: dict[str, str | int] = {"per_page": MAX_PER_PAGE}

        if stream in ("pull_requests", "issues"):
            params["state"] = "closed" if state == "merged" else state
        elif stream == "commits" and date_range is not None:
            fmt = "%Y-%m-%dT%H:%M:%SZ"
            params["since"] = date_range.start.astimezone(UTC).strftime(fmt)
            params["until"] = date_range.last_instant.astimezone(UTC).strftime(fmt)

        try:
            items: list[dict[str, Any]] = await self._get(
                f"{self.base_url}/repos/{owner}/{repo}/{path}",
                resource=f"{stream} of {owner}/{repo}",
                params=params,
            )
        except GitHubAPIError as e:
            # Discussions may simply be disabled for the repository
            if stream == "discussions" and e.status_code == 404:
                logger.debug(f"Discussions not enabled for {owner}/{repo}")
                return []
            raise
        return items
