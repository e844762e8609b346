"""Upgrade invoker: runs the installer with the unattended argument contract."""

from pathlib import Path
from typing import Optional
import logging

from upgrader.services.process import ProcessRunner

# Unattended upgrade, silent UI, no OOBE, dynamic update on, compatibility
# warnings ignored, all drivers migrated, telemetry off
INSTALLER_ARGS = (
    "/auto", "upgrade",
    "/quiet",
    "/eula", "accept",
    "/showoobe", "none",
    "/dynamicupdate", "enable",
    "/compat", "ignorewarning",
    "/migratedrivers", "all",
    "/telemetry", "disable",
)


class UpgradeInvoker:
    """Launches the installer and waits for it to exit."""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        """Initialize upgrade invoker.

        Args:
            runner: Process runner (a fresh ProcessRunner if None)
        """
        self.logger = logging.getLogger("upgrader.invoker")
        self.runner = runner or ProcessRunner()

    async def invoke(self, installer_path: Path) -> int:
        """Run the installer to completion.

        This can take hours; there is no timeout and no progress polling.

        Args:
            installer_path: Resolved setup.exe on the mounted volume

        Returns:
            Installer exit code (0 is the only success)
        """
        args = [str(installer_path), *INSTALLER_ARGS]
        self.logger.info(f"Launching installer: {' '.join(args)}")

        result = await self.runner.run(args, timeout=None)

        if result.returncode == 0:
            self.logger.info("Installer exited with code 0")
        else:
            self.logger.error(f"Installer exited with code {result.returncode}")
            if result.stderr.strip():
                self.logger.error(f"Installer stderr: {result.stderr.strip()}")
        return result.returncode
