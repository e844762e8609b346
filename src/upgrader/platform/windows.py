"""Windows implementations of the platform capabilities.

System facts come from psutil and PowerShell CIM queries, disk images are
handled by the Storage module cmdlets, and policy values are removed through
``winreg``.
"""

import ctypes
import json
import os
import platform
import sys
from pathlib import Path
from typing import Optional
import logging

import psutil

from upgrader.platform.base import TpmState
from upgrader.services.process import ProcessRunner

# Platform-specific imports with guards
if sys.platform == "win32":
    import winreg
else:
    winreg = None


def ps_quote(value: str) -> str:
    """Quote a string as a PowerShell single-quoted literal."""
    return "'" + value.replace("'", "''") + "'"


def system_volume_root() -> str:
    if sys.platform == "win32":
        return os.environ.get("SystemDrive", "C:") + "\\"
    return "/"


class WindowsProfileReader:
    """Reads OS identity, memory, disk, TPM and Secure Boot state."""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self.logger = logging.getLogger("upgrader.platform")
        self.runner = runner or ProcessRunner()

    async def is_elevated(self) -> bool:
        if sys.platform == "win32":
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        return os.geteuid() == 0

    async def read_os_identity(self) -> tuple[str, int]:
        """Return (caption, build number) of the running OS.

        Falls back to the ``platform`` module when the CIM query fails.
        """
        result = await self.runner.run_powershell(
            "Get-CimInstance -ClassName Win32_OperatingSystem | "
            "Select-Object Caption, BuildNumber | ConvertTo-Json -Compress"
        )
        if result.returncode == 0 and result.stdout.strip():
            data = json.loads(result.stdout)
            return str(data.get("Caption", "")).strip(), int(data["BuildNumber"])

        self.logger.debug(f"Win32_OperatingSystem query failed: {result.stderr.strip()}")
        # platform.version() is "10.0.19045" on Windows
        build = platform.version().rsplit(".", 1)[-1]
        return f"{platform.system()} {platform.release()}", int(build) if build.isdigit() else 0

    def total_memory(self) -> int:
        return psutil.virtual_memory().total

    def free_disk(self) -> int:
        return psutil.disk_usage(system_volume_root()).free

    async def read_tpm(self) -> TpmState:
        """Query the Win32_Tpm CIM class.

        No instance means no TPM; the query itself failing raises RuntimeError.
        """
        result = await self.runner.run_powershell(
            "Get-CimInstance -Namespace root/cimv2/Security/MicrosoftTpm "
            "-ClassName Win32_Tpm | Select-Object IsEnabled_InitialValue, "
            "IsActivated_InitialValue, SpecVersion | ConvertTo-Json -Compress"
        )
        if result.returncode != 0:
            raise RuntimeError(f"TPM query failed: {result.stderr.strip()}")
        if not result.stdout.strip():
            return TpmState()

        data = json.loads(result.stdout)
        return TpmState(
            present=True,
            enabled=bool(data.get("IsEnabled_InitialValue")),
            activated=bool(data.get("IsActivated_InitialValue")),
            spec_version=str(data.get("SpecVersion") or ""),
        )

    async def read_secure_boot(self) -> bool:
        # Confirm-SecureBootUEFI throws on legacy BIOS systems
        result = await self.runner.run_powershell("Confirm-SecureBootUEFI")
        if result.returncode != 0:
            raise RuntimeError(f"Secure Boot query failed: {result.stderr.strip()}")
        return result.stdout.strip().lower() == "true"


class WindowsDiskImageBackend:
    """Mounts ISO images with Mount-DiskImage."""

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self.logger = logging.getLogger("upgrader.platform")
        self.runner = runner or ProcessRunner()

    async def mount(self, image_path: Path) -> Path:
        """Attach the image (reusing an existing attachment) and return its drive root.

        Raises:
            RuntimeError: If the image can't be attached or exposes no volume
        """
        quoted = ps_quote(str(image_path))
        result = await self.runner.run_powershell(
            f"$img = Get-DiskImage -ImagePath {quoted} -ErrorAction Stop; "
            f"if (-not $img.Attached) {{ $img = Mount-DiskImage -ImagePath {quoted} "
            f"-PassThru -ErrorAction Stop }}; "
            f"($img | Get-Volume).DriveLetter"
        )
        if result.returncode != 0:
            raise RuntimeError(
                f"Mount-DiskImage failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )

        letter = result.stdout.strip()
        if not letter:
            raise RuntimeError(f"No volume found for {image_path}")

        return Path(f"{letter[0]}:\\")

    async def dismount(self, image_path: Path) -> None:
        result = await self.runner.run_powershell(
            f"Dismount-DiskImage -ImagePath {ps_quote(str(image_path))} -ErrorAction Stop"
        )
        if result.returncode != 0:
            raise RuntimeError(
                f"Dismount-DiskImage failed with exit code {result.returncode}: "
                f"{result.stderr.strip()}"
            )


class WinRegistryEditor:
    """Deletes registry values under HKEY_LOCAL_MACHINE."""

    HIVE_PREFIX = "HKLM\\"

    def delete_value(self, key_path: str, value_name: str) -> bool:
        """Delete one value.

        Args:
            key_path: Full key path starting with ``HKLM\\``
            value_name: Value to delete

        Returns:
            True if deleted, False if the key or value didn't exist

        Raises:
            OSError: If the registry is unavailable or access is denied
        """
        if winreg is None:
            raise OSError("Windows registry is not available on this platform")
        if not key_path.startswith(self.HIVE_PREFIX):
            raise ValueError(f"Unsupported registry hive: {key_path}")

        subkey = key_path[len(self.HIVE_PREFIX):]
        try:
            with winreg.OpenKey(
                winreg.HKEY_LOCAL_MACHINE, subkey, 0, winreg.KEY_SET_VALUE
            ) as key:
                winreg.DeleteValue(key, value_name)
        except FileNotFoundError:
            return False
        return True
