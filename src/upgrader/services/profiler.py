"""System profiler: one snapshot of OS, memory, disk and firmware state."""

from typing import Optional
import logging

from upgrader.models.profile import SystemProfile
from upgrader.platform.base import ProfileReader, TpmState
from upgrader.platform.windows import WindowsProfileReader

GIB = 1024 ** 3


class SystemProfiler:
    """Captures a SystemProfile through a ProfileReader."""

    def __init__(self, reader: Optional[ProfileReader] = None):
        """Initialize system profiler.

        Args:
            reader: Platform reader (uses WindowsProfileReader if None)
        """
        self.logger = logging.getLogger("upgrader.profiler")
        self.reader = reader or WindowsProfileReader()

    async def capture(self) -> SystemProfile:
        """Read the current system state.

        Firmware queries that fail are recorded as False/empty; deciding
        whether that blocks the upgrade is left to the eligibility gate.

        Returns:
            Immutable SystemProfile snapshot
        """
        os_name, build_number = await self.reader.read_os_identity()
        total_memory = self.reader.total_memory()
        free_disk = self.reader.free_disk()

        self.logger.info(f"Current OS: {os_name} (build {build_number})")
        self.logger.info(f"Installed RAM: {total_memory / GIB:.1f} GB")

        try:
            tpm = await self.reader.read_tpm()
        except Exception as e:
            self.logger.warning(f"TPM query failed, treating TPM as absent: {e}")
            tpm = TpmState()

        try:
            secure_boot = await self.reader.read_secure_boot()
        except Exception as e:
            self.logger.warning(f"Secure Boot query failed, treating as disabled: {e}")
            secure_boot = False

        return SystemProfile(
            os_name=os_name,
            build_number=build_number,
            total_memory_bytes=total_memory,
            free_disk_bytes=free_disk,
            tpm_present=tpm.present,
            tpm_enabled=tpm.enabled,
            tpm_activated=tpm.activated,
            tpm_spec_version=tpm.spec_version,
            secure_boot_enabled=secure_boot,
        )
