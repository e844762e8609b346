"""Global pytest fixtures and in-memory platform fakes."""

import sys
from pathlib import Path
from typing import Optional

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from upgrader.models.profile import SystemProfile
from upgrader.platform.base import TpmState
from upgrader.services.process import ProcessResult
from upgrader.services.state_manager import StateManager

GIB = 1024 ** 3


class FakeProfileReader:
    """ProfileReader returning canned values for an eligible Windows 10 machine."""

    def __init__(self):
        self.elevated = True
        self.os_name = "Microsoft Windows 10 Pro"
        self.build_number = 19045
        self.memory = 16 * GIB
        self.disk = 120 * GIB
        self.tpm = TpmState(present=True, enabled=True, activated=True, spec_version="2.0, 0, 1.59")
        self.secure_boot = True
        self.tpm_error: Optional[Exception] = None
        self.secure_boot_error: Optional[Exception] = None

    async def is_elevated(self) -> bool:
        return self.elevated

    async def read_os_identity(self):
        return self.os_name, self.build_number

    def total_memory(self) -> int:
        return self.memory

    def free_disk(self) -> int:
        return self.disk

    async def read_tpm(self) -> TpmState:
        if self.tpm_error:
            raise self.tpm_error
        return self.tpm

    async def read_secure_boot(self) -> bool:
        if self.secure_boot_error:
            raise self.secure_boot_error
        return self.secure_boot


class FakeImageBackend:
    """ImageBackend that 'mounts' by returning a prepared directory."""

    def __init__(self, volume_root: Path):
        self.volume_root = volume_root
        self.mount_error: Optional[Exception] = None
        self.dismount_error: Optional[Exception] = None
        self.mount_calls = []
        self.dismount_calls = []

    async def mount(self, image_path: Path) -> Path:
        self.mount_calls.append(image_path)
        if self.mount_error:
            raise self.mount_error
        return self.volume_root

    async def dismount(self, image_path: Path) -> None:
        self.dismount_calls.append(image_path)
        if self.dismount_error:
            raise self.dismount_error


class FakeRegistry:
    """RegistryEditor backed by a set of (key, value) pairs."""

    def __init__(self, values=None):
        self.values = set(values or [])
        self.denied = set()
        self.delete_calls = []

    def delete_value(self, key_path: str, value_name: str) -> bool:
        self.delete_calls.append((key_path, value_name))
        if (key_path, value_name) in self.denied:
            raise PermissionError(5, "Access is denied")
        if (key_path, value_name) in self.values:
            self.values.remove((key_path, value_name))
            return True
        return False


class FakeProcessRunner:
    """ProcessRunner recording calls and returning a fixed exit code."""

    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = ""):
        self.result = ProcessResult(returncode=returncode, stdout=stdout, stderr=stderr)
        self.calls = []

    async def run(self, args, timeout=None) -> ProcessResult:
        self.calls.append(list(args))
        return self.result

    async def run_powershell(self, script: str, timeout=120.0) -> ProcessResult:
        self.calls.append(["powershell.exe", script])
        return self.result


@pytest.fixture(autouse=True)
def reset_state_manager():
    """Reset the StateManager singleton around every test."""
    StateManager._instance = None
    yield
    StateManager._instance = None


@pytest.fixture
def temp_dir(tmp_path):
    """Create a temporary directory for test files."""
    yield tmp_path


@pytest.fixture
def fake_reader():
    return FakeProfileReader()


@pytest.fixture
def volume_root(tmp_path):
    """Mounted volume directory holding an installer."""
    root = tmp_path / "volume"
    root.mkdir()
    (root / "setup.exe").write_bytes(b"MZ")
    return root


@pytest.fixture
def fake_backend(volume_root):
    return FakeImageBackend(volume_root)


@pytest.fixture
def fake_registry():
    return FakeRegistry()


@pytest.fixture
def fake_runner():
    return FakeProcessRunner()


@pytest.fixture
def make_profile():
    """Factory for SystemProfile with eligible defaults."""

    def _make(**overrides) -> SystemProfile:
        fields = dict(
            os_name="Microsoft Windows 10 Pro",
            build_number=19045,
            total_memory_bytes=16 * GIB,
            free_disk_bytes=120 * GIB,
            tpm_present=True,
            tpm_enabled=True,
            tpm_activated=True,
            tpm_spec_version="2.0, 0, 1.59",
            secure_boot_enabled=True,
        )
        fields.update(overrides)
        return SystemProfile(**fields)

    return _make


@pytest.fixture
def remote_image(tmp_path):
    """A 'remote' image on a share, 64KB of data."""
    share = tmp_path / "share"
    share.mkdir()
    image = share / "install.iso"
    image.write_bytes(b"\x5a" * 64 * 1024)
    return image
