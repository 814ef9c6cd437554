"""Unit tests for the GitHub activity fetcher.

Tests GitHubActivityFetcher with mocked HTTP responses to verify:
- Search query construction per stream (date window, org scope)
- Request headers with and without a token
- Sub-lookups (event history, commit PRs, issue timeline)
- Error handling (timeouts, transport errors, API errors)
- Organization and repository listings
"""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from eod_report.services.activity import ActivityKind, ActivityScope, DateRange
from eod_report.services.activity.exceptions import UpstreamUnavailable
from eod_report.services.github import GitHubActivityFetcher, GitHubAPIError, build_search_query

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

TOKEN = "ghp_test_token_12345"
RANGE = DateRange.from_dates(date(2024, 1, 1), date(2024, 1, 5))
WINDOW = "2024-01-01T00:00:00Z..2024-01-05T23:59:59Z"


def _make_response(
    status_code: int = 200,
    json_data: object = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build a fake httpx.Response with the given status, JSON body, and headers."""
    return httpx.Response(
        status_code=status_code,
        json=json_data,
        headers=headers or {},
    )


def _mock_client(mock_get_client, *responses: httpx.Response) -> AsyncMock:
    client = AsyncMock()
    mock_get_client.return_value = client
    if len(responses) == 1:
        client.get.return_value = responses[0]
    else:
        client.get.side_effect = list(responses)
    return client


# ═══════════════════════════════════════════════════════════════════════════
# build_search_query
# ═══════════════════════════════════════════════════════════════════════════


class TestBuildSearchQuery:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            (ActivityKind.ISSUE_CREATED, f"author:octocat is:issue created:{WINDOW}"),
            (ActivityKind.PR_CREATED, f"author:octocat is:pr created:{WINDOW}"),
            (ActivityKind.PR_MERGED, f"author:octocat is:pr is:merged merged:{WINDOW}"),
            (ActivityKind.ISSUE_ASSIGNED, f"assignee:octocat is:issue created:{WINDOW}"),
            (ActivityKind.COMMIT_CREATED, f"author:octocat committer-date:{WINDOW}"),
        ],
    )
    def test_query_per_stream(self, kind, expected):
        assert build_search_query(kind, ActivityScope("octocat"), RANGE) == expected

    def test_org_scope(self):
        query = build_search_query(ActivityKind.PR_CREATED, ActivityScope("octocat", "acme"), RANGE)

        assert query.endswith(" org:acme")

    def test_window_is_rendered_in_utc(self):
        tokyo = DateRange.from_dates(date(2024, 1, 3), date(2024, 1, 3), "Asia/Tokyo")

        query = build_search_query(ActivityKind.ISSUE_CREATED, ActivityScope("octocat"), tokyo)

        assert "created:2024-01-02T15:00:00Z..2024-01-03T14:59:59Z" in query


# ═══════════════════════════════════════════════════════════════════════════
# fetch
# ═══════════════════════════════════════════════════════════════════════════


class TestFetch:
    """Tests for per-stream search requests."""

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_returns_items_from_issue_search(self, mock_get_client):
        client = _mock_client(
            mock_get_client, _make_response(json_data={"total_count": 1, "items": [{"number": 1}]})
        )

        fetcher = GitHubActivityFetcher(TOKEN)
        items = await fetcher.fetch(ActivityKind.ISSUE_CREATED, ActivityScope("octocat"), RANGE)

        assert items == [{"number": 1}]
        call = client.get.call_args
        assert call.args[0] == "https://api.github.com/search/issues"
        assert call.kwargs["params"]["q"] == f"author:octocat is:issue created:{WINDOW}"
        assert call.kwargs["params"]["per_page"] == 100

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_commit_stream_uses_commit_search(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data={"items": []}))

        fetcher = GitHubActivityFetcher(TOKEN, base_url="https://ghe.example.com/api/v3/")
        await fetcher.fetch(ActivityKind.COMMIT_CREATED, ActivityScope("octocat"), RANGE)

        assert client.get.call_args.args[0] == "https://ghe.example.com/api/v3/search/commits"

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_caps_per_page_at_100(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data={"items": []}))

        fetcher = GitHubActivityFetcher(TOKEN, per_page=500)
        await fetcher.fetch(ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE)

        assert client.get.call_args.kwargs["params"]["per_page"] == 100

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_sends_token_when_configured(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data={"items": []}))

        await GitHubActivityFetcher(TOKEN).fetch(
            ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE
        )

        headers = client.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == f"Bearer {TOKEN}"
        assert headers["X-GitHub-Api-Version"] == "2022-11-28"

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_anonymous_requests_have_no_auth_header(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data={"items": []}))

        fetcher = GitHubActivityFetcher()
        await fetcher.fetch(ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE)

        assert fetcher.authenticated is False
        assert "Authorization" not in client.get.call_args.kwargs["headers"]

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_timeout_raises_api_error(self, mock_get_client):
        client = _mock_client(mock_get_client)
        client.get.side_effect = httpx.TimeoutException("timed out")

        with pytest.raises(GitHubAPIError, match="Timed out"):
            await GitHubActivityFetcher(TOKEN).fetch(
                ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE
            )

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_transport_error_is_upstream_unavailable(self, mock_get_client):
        client = _mock_client(mock_get_client)
        client.get.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(UpstreamUnavailable):
            await GitHubActivityFetcher(TOKEN).fetch(
                ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE
            )

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_raises_on_rate_limit(self, mock_get_client):
        _mock_client(
            mock_get_client,
            _make_response(
                status_code=403,
                headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"},
            ),
        )

        with pytest.raises(GitHubAPIError, match="rate limit") as exc_info:
            await GitHubActivityFetcher(TOKEN).fetch(
                ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE
            )

        assert exc_info.value.rate_limit_reset == 1700000000

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_non_json_body_is_upstream_unavailable(self, mock_get_client):
        _mock_client(mock_get_client, httpx.Response(200, content=b"<html>bad gateway</html>"))

        with pytest.raises(GitHubAPIError, match="Invalid JSON from pr-created search"):
            await GitHubActivityFetcher(TOKEN).fetch(
                ActivityKind.PR_CREATED, ActivityScope("octocat"), RANGE
            )

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_non_json_stream_degrades_collection(self, mock_get_client):
        from eod_report.services.activity import ReportConfig, collect_activity

        _mock_client(mock_get_client, httpx.Response(200, content=b"<html>bad gateway</html>"))

        bundle = await collect_activity(
            ReportConfig(username="octocat", date_range=RANGE), GitHubActivityFetcher()
        )

        assert bundle.timeline == ()
        assert len(bundle.notices) == 5
        assert all("Invalid JSON" in notice for notice in bundle.notices)


# ═══════════════════════════════════════════════════════════════════════════
# Sub-lookups
# ═══════════════════════════════════════════════════════════════════════════


class TestSubLookups:
    """Tests for per-event lookups, which use the shorter lookup timeout."""

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_event_history(self, mock_get_client):
        events = [{"event": "assigned", "assignee": {"login": "octocat"}}]
        client = _mock_client(mock_get_client, _make_response(json_data=events))
        url = "https://api.github.com/repos/acme/web/issues/1/events"

        fetcher = GitHubActivityFetcher(TOKEN, lookup_timeout=3.0)
        result = await fetcher.fetch_event_history(url)

        assert result == events
        assert client.get.call_args.args[0] == url
        assert client.get.call_args.kwargs["timeout"] == 3.0

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_commit_pull_requests(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data=[{"node_id": "PR_1"}]))
        url = "https://api.github.com/repos/acme/web/commits/abc"

        result = await GitHubActivityFetcher(TOKEN).fetch_commit_pull_requests(url)

        assert result == [{"node_id": "PR_1"}]
        assert client.get.call_args.args[0] == f"{url}/pulls"

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_issue_timeline_keeps_pull_request_cross_references(self, mock_get_client):
        timeline = [
            {"event": "labeled"},
            {
                "event": "cross-referenced",
                "source": {"issue": {"node_id": "PR_1", "number": 4, "pull_request": {"url": "x"}}},
            },
            {"event": "cross-referenced", "source": {"issue": {"node_id": "I_9", "number": 9}}},
        ]
        client = _mock_client(mock_get_client, _make_response(json_data=timeline))
        url = "https://api.github.com/repos/acme/web/issues/1"

        linked = await GitHubActivityFetcher(TOKEN).fetch_issue_linked_pull_requests(url)

        assert [pr["node_id"] for pr in linked] == ["PR_1"]
        assert client.get.call_args.args[0] == f"{url}/timeline"

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_lookup_404_raises(self, mock_get_client):
        _mock_client(mock_get_client, _make_response(status_code=404))

        with pytest.raises(GitHubAPIError, match="Not found") as exc_info:
            await GitHubActivityFetcher(TOKEN).fetch_event_history("https://x/events")

        assert exc_info.value.status_code == 404


# ═══════════════════════════════════════════════════════════════════════════
# Users and repositories
# ═══════════════════════════════════════════════════════════════════════════


class TestListOrganizations:
    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_merges_private_memberships(self, mock_get_client):
        client = _mock_client(
            mock_get_client,
            _make_response(json_data=[{"login": "acme"}, {"login": "octo-org"}]),
            _make_response(json_data=[{"login": "octo-org"}, {"login": "secret-org"}]),
        )

        orgs = await GitHubActivityFetcher(TOKEN).list_organizations("octocat")

        assert orgs == ["acme", "octo-org", "secret-org"]
        assert client.get.call_args_list[0].args[0] == "https://api.github.com/users/octocat/orgs"
        assert client.get.call_args_list[1].args[0] == "https://api.github.com/user/orgs"

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_anonymous_lists_public_only(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data=[{"login": "acme"}]))

        orgs = await GitHubActivityFetcher().list_organizations("octocat")

        assert orgs == ["acme"]
        assert client.get.call_count == 1

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_private_failure_keeps_public(self, mock_get_client):
        _mock_client(
            mock_get_client,
            _make_response(json_data=[{"login": "acme"}]),
            _make_response(status_code=401),
        )

        orgs = await GitHubActivityFetcher(TOKEN).list_organizations("octocat")

        assert orgs == ["acme"]


class TestListRepositoryItems:
    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_merged_is_requested_as_closed(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data=[]))

        await GitHubActivityFetcher(TOKEN).list_repository_items(
            "acme", "web", "pull_requests", "merged"
        )

        call = client.get.call_args
        assert call.args[0] == "https://api.github.com/repos/acme/web/pulls"
        assert call.kwargs["params"]["state"] == "closed"

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_commits_pass_date_window(self, mock_get_client):
        client = _mock_client(mock_get_client, _make_response(json_data=[]))

        await GitHubActivityFetcher(TOKEN).list_repository_items(
            "acme", "web", "commits", "all", RANGE
        )

        params = client.get.call_args.kwargs["params"]
        assert params["since"] == "2024-01-01T00:00:00Z"
        assert params["until"] == "2024-01-05T23:59:59Z"
        assert "state" not in params

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_disabled_discussions_are_empty(self, mock_get_client):
        _mock_client(mock_get_client, _make_response(status_code=404))

        items = await GitHubActivityFetcher(TOKEN).list_repository_items(
            "acme", "web", "discussions"
        )

        assert items == []

    @patch("eod_report.services.github.read_operations.get_github_client")
    @pytest.mark.anyio
    async def test_missing_repository_raises(self, mock_get_client):
        _mock_client(mock_get_client, _make_response(status_code=404))

        with pytest.raises(GitHubAPIError, match="Not found: issues of acme/gone"):
            await GitHubActivityFetcher(TOKEN).list_repository_items("acme", "gone", "issues")
