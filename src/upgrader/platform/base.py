"""Capability interfaces for platform-coupled operations.

The services only talk to the machine through these protocols. Windows
implementations live in ``upgrader.platform.windows``; tests supply
in-memory fakes.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


@dataclass(frozen=True)
class TpmState:
    present: bool = False
    enabled: bool = False
    activated: bool = False
    spec_version: str = ""


class ProfileReader(Protocol):
    """Reads facts about the current machine and session."""

    async def is_elevated(self) -> bool: ...

    async def read_os_identity(self) -> tuple[str, int]: ...

    def total_memory(self) -> int: ...

    def free_disk(self) -> int: ...

    async def read_tpm(self) -> TpmState: ...

    async def read_secure_boot(self) -> bool: ...


class ImageBackend(Protocol):
    """Attaches and detaches disk images."""

    async def mount(self, image_path: Path) -> Path:
        """Mount the image and return the root of its volume."""
        ...

    async def dismount(self, image_path: Path) -> None: ...


class RegistryEditor(Protocol):
    """Deletes configuration values.

    ``delete_value`` returns False when the key or value does not exist and
    raises OSError on any other failure.
    """

    def delete_value(self, key_path: str, value_name: str) -> bool: ...
