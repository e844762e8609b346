"""Status enums for the upgrade session."""

from enum import Enum, IntEnum


class StageEnum(str, Enum):
    """Upgrade session stages.

    State transitions (strict sequence, any failure stops forward progress):
    init → elevation_check → already_upgraded_check → eligibility
         → policy_unlock → media_staging → mount → invoke → done

    already_upgraded_check succeeding ends the session with success.
    """

    INIT = "init"
    ELEVATION_CHECK = "elevation_check"
    ALREADY_UPGRADED_CHECK = "already_upgraded_check"
    ELIGIBILITY = "eligibility"
    POLICY_UNLOCK = "policy_unlock"
    MEDIA_STAGING = "media_staging"
    MOUNT = "mount"
    INVOKE = "invoke"
    DONE = "done"


class ExitCode(IntEnum):
    """Process exit codes, one per failing stage."""

    SUCCESS = 0
    NOT_ELEVATED = 1
    PREREQUISITES_FAILED = 2
    POLICY_UNLOCK_FAILED = 3
    MEDIA_STAGING_FAILED = 4
    MOUNT_FAILED = 5
    INSTALLER_FAILED = 6
    UNEXPECTED = 99


class OutcomeStatus(str, Enum):
    """Terminal status tag of a session."""

    ALREADY_CURRENT = "already_current"
    UPGRADE_STARTED = "upgrade_started"
    NOT_ELEVATED = "not_elevated"
    PREREQUISITES_FAILED = "prerequisites_failed"
    POLICY_UNLOCK_FAILED = "policy_unlock_failed"
    MEDIA_STAGING_FAILED = "media_staging_failed"
    MOUNT_FAILED = "mount_failed"
    INSTALLER_FAILED = "installer_failed"
    UNEXPECTED_FAILURE = "unexpected_failure"


class EligibilityVerdict(str, Enum):
    ALREADY_UPGRADED = "already_upgraded"
    ELIGIBLE = "eligible"
    INELIGIBLE = "ineligible"


class StagingAction(str, Enum):
    """What MediaStager did with the local copy."""

    SKIPPED = "skipped"
    RECOPIED = "recopied"
    COPIED_FRESH = "copied_fresh"
    STALE_TOLERATED = "stale_tolerated"
    FAILED = "failed"


class StagingFailure(str, Enum):
    MEDIA_UNREACHABLE = "media_unreachable"
    MEDIA_SIZE_MISMATCH = "media_size_mismatch"
    LOCAL_MEDIA_UNWRITABLE = "local_media_unwritable"
