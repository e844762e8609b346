"""Exception taxonomy for upgrade session failures.

Each fatal error carries the exit code owned by the stage that raised it.
Messages start with an upper-case error code (e.g. ``MEDIA_UNREACHABLE:``)
so the log and the status API show the precise cause.
"""

from typing import Optional, Sequence

from upgrader.models.status import ExitCode, OutcomeStatus


class UpgradeError(Exception):
    """Base exception for all fatal upgrade session errors."""

    exit_code: ExitCode = ExitCode.UNEXPECTED
    status: OutcomeStatus = OutcomeStatus.UNEXPECTED_FAILURE
    code: str = "UNEXPECTED_FAILURE"

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{self.code}: {message}")


class NotElevated(UpgradeError):
    """Raised when the session lacks administrative privileges."""

    exit_code = ExitCode.NOT_ELEVATED
    status = OutcomeStatus.NOT_ELEVATED
    code = "NOT_ELEVATED"


class PrerequisiteFailure(UpgradeError):
    """Raised when hardware/firmware prerequisites are not met."""

    exit_code = ExitCode.PREREQUISITES_FAILED
    status = OutcomeStatus.PREREQUISITES_FAILED
    code = "PREREQUISITE_FAILURE"

    def __init__(self, reasons: Sequence[str]):
        self.reasons = list(reasons)
        super().__init__("; ".join(self.reasons) or "prerequisite checks failed")


class PolicyUnlockFailure(UpgradeError):
    exit_code = ExitCode.POLICY_UNLOCK_FAILED
    status = OutcomeStatus.POLICY_UNLOCK_FAILED
    code = "POLICY_UNLOCK_FAILURE"


class MediaUnreachable(UpgradeError):
    exit_code = ExitCode.MEDIA_STAGING_FAILED
    status = OutcomeStatus.MEDIA_STAGING_FAILED
    code = "MEDIA_UNREACHABLE"


class MediaSizeMismatch(UpgradeError):
    exit_code = ExitCode.MEDIA_STAGING_FAILED
    status = OutcomeStatus.MEDIA_STAGING_FAILED
    code = "MEDIA_SIZE_MISMATCH"


class LocalMediaUnwritable(UpgradeError):
    """Raised when the local staging path can't be created or replaced."""

    exit_code = ExitCode.MEDIA_STAGING_FAILED
    status = OutcomeStatus.MEDIA_STAGING_FAILED
    code = "LOCAL_MEDIA_UNWRITABLE"


class MountFailure(UpgradeError):
    """Raised when the disk image cannot be mounted or has no volume."""

    exit_code = ExitCode.MOUNT_FAILED
    status = OutcomeStatus.MOUNT_FAILED
    code = "MOUNT_FAILURE"


class InstallerMissing(UpgradeError):
    """Raised when the mounted volume has no installer at its root."""

    exit_code = ExitCode.MOUNT_FAILED
    status = OutcomeStatus.MOUNT_FAILED
    code = "INSTALLER_MISSING"


class InstallerNonZeroExit(UpgradeError):
    exit_code = ExitCode.INSTALLER_FAILED
    status = OutcomeStatus.INSTALLER_FAILED
    code = "INSTALLER_NONZERO_EXIT"

    def __init__(self, installer_exit_code: int):
        self.installer_exit_code = installer_exit_code
        super().__init__(f"installer exited with code {installer_exit_code}")


class UnexpectedFailure(UpgradeError):
    """Wraps any exception not covered by the taxonomy above."""

    def __init__(self, cause: Optional[BaseException]):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}" if cause else "unknown error")


class AlreadyCurrent(Exception):
    """Success sentinel: the system already runs the target OS."""

    def __init__(self, build_number: int):
        self.build_number = build_number
        super().__init__(f"Build {build_number} is already current")
