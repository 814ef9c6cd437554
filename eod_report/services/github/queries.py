"""Search query construction for the activity streams."""

from eod_report.services.activity.types import ActivityKind, ActivityScope, DateRange


def build_search_query(kind: ActivityKind, scope: ActivityScope, date_range: DateRange) -> str:
    """
    Build the GitHub search query for one activity stream.

    Examples:
        author:octocat is:pr created:2024-01-01T00:00:00Z..2024-01-05T23:59:59Z
        author:octocat committer-date:2024-01-01T00:00:00Z..2024-01-05T23:59:59Z org:acme
    """
    window = date_range.to_search_qualifier()
    user = scope.username

    match kind:
        case ActivityKind.ISSUE_CREATED:
            terms = [f"author:{user}", "is:issue", f"created:{window}"]
        case ActivityKind.PR_CREATED:
            terms = [f"author:{user}", "is:pr", f"created:{window}"]
        case ActivityKind.PR_MERGED:
            terms = [f"author:{user}", "is:pr", "is:merged", f"merged:{window}"]
        case ActivityKind.ISSUE_ASSIGNED:
            terms = [f"assignee:{user}", "is:issue", f"created:{window}"]
        case ActivityKind.COMMIT_CREATED:
            terms = [f"author:{user}", f"committer-date:{window}"]

    if scope.organization:
        terms.append(f"org:{scope.organization}")
    return " ".join(terms)


def search_endpoint(kind: ActivityKind) -> str:
    """Search API path serving the given stream."""
    if kind is ActivityKind.COMMIT_CREATED:
        return "/search/commits"
    return "/search/issues"
