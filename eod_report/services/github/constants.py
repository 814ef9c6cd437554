"""Constants for GitHub service."""

API_VERSION = "2022-11-28"

# Search results beyond the first page are never requested
MAX_PER_PAGE = 100

# Issue timeline event marking a reference from another issue or pull request
CROSS_REFERENCED_EVENT = "cross-referenced"

# Repository-scoped streams available to the export pipeline
REPOSITORY_STREAMS: dict[str, str] = {
    "pull_requests": "pulls",
    "issues": "issues",
    "commits": "commits",
    "releases": "releases",
    "discussions": "discussions",
}

# Item states accepted by the export pipeline; "merged" is a post-filter
EXPORT_STATES: set[str] = {"all", "open", "closed", "merged"}
