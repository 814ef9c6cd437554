"""GitHub user lookup endpoints (organization picker for reports)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from eod_report.api.deps import get_github_fetcher
from eod_report.services.github import GitHubActivityFetcher, GitHubAPIError

router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


class OrganizationsResponse(BaseModel):
    username: str
    organizations: list[str]


@router.get("/{username}/organizations", response_model=OrganizationsResponse)
async def list_user_organizations(
    username: str,
    fetcher: GitHubActivityFetcher = Depends(get_github_fetcher),
) -> OrganizationsResponse:
    """List the organizations a GitHub user belongs to."""
    try:
        organizations = await fetcher.list_organizations(username)
    except GitHubAPIError as e:
        logger.warning(f"Organization lookup failed for {username}: {e.message}")
        code = (
            status.HTTP_404_NOT_FOUND if e.status_code == 404 else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(status_code=code, detail=e.message) from e

    return OrganizationsResponse(username=username, organizations=organizations)
