"""Session configuration model."""

import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _temp_path(*parts: str) -> Path:
    return Path(tempfile.gettempdir()).joinpath(*parts)


class UpgradeConfig(BaseModel):
    """Options for one upgrade session.

    Passed explicitly into the orchestrator; nothing is read from ambient
    script state.
    """

    log_path: Path = Field(
        default_factory=lambda: _temp_path("upgrader", "upgrade.log"),
        description="Append-only session log",
    )
    local_media_path: Path = Field(
        default_factory=lambda: _temp_path("upgrader", "media", "install.iso"),
        description="Where the installation image is staged",
    )
    remote_media_source: str = Field(
        ..., min_length=1, description="UNC/filesystem path or http(s) URL of the image"
    )
    skip_checks: bool = Field(default=False, description="Bypass prerequisite checks")
    keep_media: bool = Field(
        default=False, description="Keep the staged image after the session"
    )
    report_url: Optional[str] = Field(
        None,
        pattern=r"^https?://.+",
        description="Optional endpoint notified on every stage transition",
    )

    @field_validator("remote_media_source", mode="before")
    @classmethod
    def strip_source(cls, v):
        """Tolerate quoted paths pasted from Explorer."""
        if isinstance(v, str):
            return v.strip().strip('"')
        return v
