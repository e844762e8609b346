"""Eligibility gate: already-upgraded short-circuit and prerequisite checks."""

import logging

from upgrader.models.profile import SystemProfile
from upgrader.models.results import EligibilityResult

GIB = 1024 ** 3

# First build number of the target OS major version
TARGET_BUILD = 22000
MIN_MEMORY_BYTES = 4 * GIB
MIN_FREE_DISK_BYTES = 25 * GIB
REQUIRED_TPM_VERSION = "2.0"


class EligibilityGate:
    """Decides whether the upgrade pipeline should run.

    Checks run cheapest first: memory and disk are plain numbers, the TPM
    fields come from firmware queries that may have degraded to False.
    """

    def __init__(self):
        self.logger = logging.getLogger("upgrader.eligibility")

    def evaluate(self, profile: SystemProfile, skip_checks: bool = False) -> EligibilityResult:
        """Evaluate a system profile.

        Args:
            profile: Snapshot from SystemProfiler
            skip_checks: Bypass RAM/disk/TPM/Secure Boot checks

        Returns:
            already_upgraded if build >= TARGET_BUILD, eligible when all
            blocking checks pass (or are skipped), ineligible with reasons
            otherwise
        """
        if profile.build_number >= TARGET_BUILD:
            self.logger.info(
                f"Build {profile.build_number} >= {TARGET_BUILD}, already upgraded"
            )
            return EligibilityResult.already_upgraded()

        if skip_checks:
            warning = "Prerequisite checks skipped by request"
            self.logger.warning(warning)
            return EligibilityResult.eligible(warnings=[warning])

        reasons: list[str] = []
        warnings: list[str] = []

        if profile.total_memory_bytes < MIN_MEMORY_BYTES:
            reasons.append(
                f"RAM: {profile.total_memory_bytes / GIB:.1f} GB installed, "
                f"{MIN_MEMORY_BYTES // GIB} GB required"
            )

        if profile.free_disk_bytes < MIN_FREE_DISK_BYTES:
            reasons.append(
                f"Disk: {profile.free_disk_bytes / GIB:.1f} GB free on system volume, "
                f"{MIN_FREE_DISK_BYTES // GIB} GB required"
            )

        tpm_problem = self._tpm_problem(profile)
        if tpm_problem:
            reasons.append(f"TPM: {tpm_problem}")

        if not profile.secure_boot_enabled:
            warning = "Secure Boot is not enabled"
            self.logger.warning(warning)
            warnings.append(warning)

        if reasons:
            for reason in reasons:
                self.logger.error(f"Prerequisite failed: {reason}")
            return EligibilityResult.ineligible(reasons, warnings=warnings)

        self.logger.info("All prerequisite checks passed")
        return EligibilityResult.eligible(warnings=warnings)

    @staticmethod
    def _tpm_problem(profile: SystemProfile) -> str:
        if not profile.tpm_present:
            return "not present"
        if not profile.tpm_enabled:
            return "present but not enabled"
        if not profile.tpm_activated:
            return "present but not activated"
        if REQUIRED_TPM_VERSION not in profile.tpm_spec_version:
            return (
                f"spec version '{profile.tpm_spec_version}' does not include "
                f"{REQUIRED_TPM_VERSION}"
            )
        return ""
