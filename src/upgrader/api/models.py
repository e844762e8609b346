"""Pydantic models for HTTP API requests and responses."""

from typing import Optional
from pydantic import BaseModel, Field

from upgrader.models.status import StageEnum


class UpgradeRequest(BaseModel):
    """POST /api/v1.0/upgrade payload.

    Overrides for the service's base configuration; omitted fields keep the
    values the service was started with.

    Example:
        {
            "skip_checks": false,
            "keep_media": true
        }
    """

    skip_checks: Optional[bool] = Field(None, description="Bypass prerequisite checks")
    keep_media: Optional[bool] = Field(
        None, description="Keep the staged image after the session"
    )
    remote_media_source: Optional[str] = Field(
        None,
        min_length=1,
        description="Override the image source (UNC path or http(s) URL)",
        examples=["\\\\fileserver\\media\\Win11_23H2_x64.iso"],
    )


class ProgressData(BaseModel):
    """Session status nested in responses."""

    stage: StageEnum = Field(..., description="Current or last session stage")
    running: bool = Field(False, description="True while a session is in progress")
    message: str = Field(..., description="Human-readable status description")
    error: Optional[str] = Field(None, description="Error code and message if the session failed")
    exit_code: Optional[int] = Field(
        None, description="Exit code of the last finished session"
    )


class ProgressResponse(BaseModel):
    """GET /api/v1.0/progress response.

    HTTP status is always 200; the application-level status is in ``code``.
    """

    code: int = Field(..., description="Application-level status code (200/500)")
    msg: str = Field(..., description="Status message or error description")
    data: ProgressData = Field(..., description="Progress data")


class SuccessResponse(BaseModel):
    """Response for command endpoints that started successfully."""

    code: int = Field(default=200, description="Application-level status code (200)")
    msg: str = Field(default="success", description="Success message")
    data: Optional[dict] = Field(None, description="Optional response data")


class ReportPayload(BaseModel):
    """Payload POSTed to the configured report URL on every stage transition."""

    stage: StageEnum = Field(..., description="Current session stage")
    message: str = Field(..., description="Human-readable status description")
    error: Optional[str] = Field(None, description="Error code and message if failed")
    exit_code: Optional[int] = Field(None, description="Set on the final report")
