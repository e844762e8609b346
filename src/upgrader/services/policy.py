"""Policy unlocker: removes configuration entries that block the upgrade offer."""

from typing import Optional
import logging

from upgrader.platform.base import RegistryEditor
from upgrader.platform.windows import WinRegistryEditor

WINDOWS_UPDATE_POLICY_KEY = "HKLM\\SOFTWARE\\Policies\\Microsoft\\Windows\\WindowsUpdate"
UPDATE_UX_SETTINGS_KEY = "HKLM\\SOFTWARE\\Microsoft\\WindowsUpdate\\UX\\Settings"

# (key, value) pairs: the target-version pin and the declined-offer flag
BLOCKING_VALUES = [
    (WINDOWS_UPDATE_POLICY_KEY, "TargetReleaseVersion"),
    (WINDOWS_UPDATE_POLICY_KEY, "TargetReleaseVersionInfo"),
    (WINDOWS_UPDATE_POLICY_KEY, "ProductVersion"),
    (UPDATE_UX_SETTINGS_KEY, "SvOfferDeclined"),
]


class PolicyUnlocker:
    """Deletes upgrade-blocking policy values, tolerating their absence."""

    def __init__(self, registry: Optional[RegistryEditor] = None):
        """Initialize policy unlocker.

        Args:
            registry: Registry editor (uses WinRegistryEditor if None)
        """
        self.logger = logging.getLogger("upgrader.policy")
        self.registry = registry or WinRegistryEditor()

    def remove_blocks(self) -> bool:
        """Remove every known blocking value.

        Safe to call repeatedly: values already gone are skipped.

        Returns:
            True if all values are absent afterwards, False on an access failure
        """
        cleared = True
        for key_path, value_name in BLOCKING_VALUES:
            try:
                removed = self.registry.delete_value(key_path, value_name)
            except OSError as e:
                self.logger.error(
                    f"Failed to remove {key_path}\\{value_name}: {e}"
                )
                cleared = False
                continue

            if removed:
                self.logger.info(f"Removed upgrade block {key_path}\\{value_name}")
            else:
                self.logger.debug(f"Not present: {key_path}\\{value_name}")

        if cleared:
            self.logger.info("Upgrade policy blocks cleared")
        return cleared
