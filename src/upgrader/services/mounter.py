"""Image mounter: attaches staged media and locates the installer."""

from pathlib import Path
from typing import Optional
import logging

from upgrader.models.errors import InstallerMissing, MountFailure
from upgrader.models.results import MountedMedia
from upgrader.platform.base import ImageBackend
from upgrader.platform.windows import WindowsDiskImageBackend

INSTALLER_NAME = "setup.exe"


class ImageMounter:
    """Mounts disk images through an ImageBackend."""

    def __init__(self, backend: Optional[ImageBackend] = None):
        """Initialize image mounter.

        Args:
            backend: Disk image backend (uses WindowsDiskImageBackend if None)
        """
        self.logger = logging.getLogger("upgrader.mounter")
        self.backend = backend or WindowsDiskImageBackend()

    async def mount(self, local_media_path: Path) -> MountedMedia:
        """Mount the image and resolve the installer at its volume root.

        Args:
            local_media_path: Staged image on local disk

        Returns:
            MountedMedia whose installer_path existed when checked

        Raises:
            MountFailure: If the image is missing or can't be mounted
            InstallerMissing: If the volume has no installer at its root
        """
        local_media_path = Path(local_media_path)
        if not local_media_path.is_file():
            raise MountFailure(f"image not found: {local_media_path}")

        self.logger.info(f"Mounting {local_media_path}")
        try:
            volume_root = await self.backend.mount(local_media_path)
        except Exception as e:
            raise MountFailure(f"could not mount {local_media_path}: {e}") from e

        self.logger.info(f"Image mounted at {volume_root}")

        installer_path = Path(volume_root) / INSTALLER_NAME
        if not installer_path.is_file():
            raise InstallerMissing(f"{INSTALLER_NAME} not found at {volume_root}")

        self.logger.info(f"Installer found: {installer_path}")
        return MountedMedia(
            image_path=local_media_path,
            volume_root=Path(volume_root),
            installer_path=installer_path,
        )

    async def unmount(self, image_path: Path) -> None:
        """Detach the image.

        Raises:
            Whatever the backend raises; callers decide whether to swallow it
        """
        await self.backend.dismount(Path(image_path))
        self.logger.info(f"Unmounted {image_path}")
