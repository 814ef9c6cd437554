"""
Activity export endpoints.

Downloads one repository's pull requests, issues, commits, releases or
discussions as a CSV or JSON file.
"""

import json
import logging
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from pydantic import BaseModel, Field

from eod_report.api.deps import get_github_fetcher
from eod_report.services.activity import DateRange, ExportInputError
from eod_report.services.export import ExportRequest, export_repository_activity
from eod_report.services.export.repository_activity import DEFAULT_EXPORT_FIELDS
from eod_report.services.github import GitHubActivityFetcher

router = APIRouter(prefix="/exports", tags=["exports"])
logger = logging.getLogger(__name__)


class ActivityExportRequest(BaseModel):
    """Request to export repository activity."""

    repository: str = Field(description="owner/repo or a github.com repository URL")
    start_date: date
    end_date: date = Field(description="Last day included in the export")
    activity_types: list[str] = Field(default_factory=lambda: ["pull_requests", "issues"])
    state: str = "all"
    format: Literal["csv", "json"] = "csv"
    selected_fields: list[str] = Field(default_factory=lambda: list(DEFAULT_EXPORT_FIELDS))


@router.post("/activity")
async def export_activity(
    body: ActivityExportRequest,
    fetcher: GitHubActivityFetcher = Depends(get_github_fetcher),
) -> Response:
    """
    Export repository activity as a file download.

    Streams that could not be fetched are listed, as a JSON array of
    messages, in the X-Export-Notices header.
    """
    if body.start_date > body.end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Start date should be before end date",
        )

    request = ExportRequest(
        repository=body.repository,
        date_range=DateRange.from_dates(body.start_date, body.end_date),
        activity_types=body.activity_types,
        state=body.state,
        format=body.format,
        selected_fields=body.selected_fields,
    )
    try:
        result = await export_repository_activity(request, fetcher)
    except ExportInputError as e:
        logger.info(f"Rejected export of {body.repository!r}: {e.message}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    headers = {
        "Content-Disposition": f'attachment; filename="{result.filename}"',
        "X-Total-Count": str(result.total),
    }
    if result.notices:
        headers["X-Export-Notices"] = json.dumps(result.notices)
        logger.warning(f"Export of {body.repository} is partial: {len(result.notices)} notices")
    return Response(content=result.content, media_type=result.media_type, headers=headers)
