"""System profile snapshot model."""

from pydantic import BaseModel, ConfigDict, Field


class SystemProfile(BaseModel):
    """Immutable snapshot of the machine, captured once per session.

    Firmware fields default to False/empty when the query is unavailable
    (non-UEFI firmware, no TPM); the eligibility gate decides what blocks.
    """

    model_config = ConfigDict(frozen=True)

    os_name: str = Field(..., description="OS display name (e.g. 'Microsoft Windows 10 Pro')")
    build_number: int = Field(..., ge=0, description="OS build number (e.g. 19045)")
    total_memory_bytes: int = Field(..., ge=0, description="Total physical memory")
    free_disk_bytes: int = Field(..., ge=0, description="Free space on the system volume")
    tpm_present: bool = Field(default=False)
    tpm_enabled: bool = Field(default=False)
    tpm_activated: bool = Field(default=False)
    tpm_spec_version: str = Field(
        default="", description="TPM SpecVersion string (e.g. '2.0, 0, 1.59')"
    )
    secure_boot_enabled: bool = Field(default=False)
