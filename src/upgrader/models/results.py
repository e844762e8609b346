"""Stage result models for the upgrade session."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from upgrader.models.status import (
    EligibilityVerdict,
    ExitCode,
    OutcomeStatus,
    StageEnum,
    StagingAction,
    StagingFailure,
)


class EligibilityResult(BaseModel):
    """Outcome of the eligibility gate.

    ``reasons`` lists blocking failures in check order (RAM, disk, TPM).
    Secure Boot only ever shows up in ``warnings``.
    """

    verdict: EligibilityVerdict
    reasons: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def already_upgraded(cls) -> "EligibilityResult":
        return cls(verdict=EligibilityVerdict.ALREADY_UPGRADED)

    @classmethod
    def eligible(cls, warnings: Optional[list[str]] = None) -> "EligibilityResult":
        return cls(verdict=EligibilityVerdict.ELIGIBLE, warnings=warnings or [])

    @classmethod
    def ineligible(
        cls, reasons: list[str], warnings: Optional[list[str]] = None
    ) -> "EligibilityResult":
        return cls(
            verdict=EligibilityVerdict.INELIGIBLE,
            reasons=reasons,
            warnings=warnings or [],
        )

    @property
    def is_eligible(self) -> bool:
        return self.verdict == EligibilityVerdict.ELIGIBLE


class MediaStagingState(BaseModel):
    """Result of staging installation media to local disk."""

    remote_source: str = Field(..., description="Remote path or http(s) URL")
    local_destination: Path = Field(..., description="Local staging path")
    source_size: Optional[int] = Field(
        None, ge=0, description="Remote size in bytes (None if unreachable)"
    )
    local_size: Optional[int] = Field(
        None, ge=0, description="Local size in bytes (None if no local file)"
    )
    action: StagingAction = Field(..., description="What was done with the local copy")
    failure: Optional[StagingFailure] = Field(None, description="Set when action == failed")
    error: Optional[str] = Field(None, description="Error message when failed")

    @property
    def succeeded(self) -> bool:
        return self.action != StagingAction.FAILED


class MountedMedia(BaseModel):
    """A mounted installation image.

    Only valid between mount and unmount; the orchestrator owns it.
    """

    image_path: Path
    volume_root: Path
    installer_path: Path


class UpgradeOutcome(BaseModel):
    """Terminal result of one upgrade session."""

    exit_code: ExitCode
    status: OutcomeStatus
    stage: StageEnum = Field(..., description="Stage the session stopped in")
    log_path: Path
    message: str = ""
    installer_exit_code: Optional[int] = None
    reasons: list[str] = Field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS
