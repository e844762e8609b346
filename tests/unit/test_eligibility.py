"""Unit tests for EligibilityGate."""

import logging

import pytest

from upgrader.models.status import EligibilityVerdict
from upgrader.services.eligibility import (
    EligibilityGate,
    MIN_FREE_DISK_BYTES,
    MIN_MEMORY_BYTES,
    TARGET_BUILD,
)

GIB = 1024 ** 3


@pytest.mark.unit
class TestEligibilityGate:
    """Test EligibilityGate in isolation."""

    @pytest.fixture
    def gate(self):
        return EligibilityGate()

    @pytest.mark.parametrize("build", [TARGET_BUILD, 22621, 26100])
    def test_already_upgraded_regardless_of_hardware(self, gate, make_profile, build):
        """Builds at or above the target short-circuit even on bad hardware."""
        profile = make_profile(
            build_number=build,
            total_memory_bytes=1 * GIB,
            free_disk_bytes=0,
            tpm_present=False,
            secure_boot_enabled=False,
        )

        result = gate.evaluate(profile)

        assert result.verdict == EligibilityVerdict.ALREADY_UPGRADED
        assert result.reasons == []

    def test_already_upgraded_wins_over_skip_checks(self, gate, make_profile):
        result = gate.evaluate(make_profile(build_number=22631), skip_checks=True)

        assert result.verdict == EligibilityVerdict.ALREADY_UPGRADED

    def test_eligible_machine(self, gate, make_profile):
        result = gate.evaluate(make_profile())

        assert result.verdict == EligibilityVerdict.ELIGIBLE
        assert result.is_eligible
        assert result.reasons == []
        assert result.warnings == []

    @pytest.mark.parametrize("memory", [0, 2 * GIB, MIN_MEMORY_BYTES - 1])
    def test_low_memory_is_ineligible(self, gate, make_profile, memory):
        result = gate.evaluate(make_profile(total_memory_bytes=memory))

        assert result.verdict == EligibilityVerdict.INELIGIBLE
        assert len(result.reasons) == 1
        assert result.reasons[0].startswith("RAM")

    def test_exact_memory_threshold_passes(self, gate, make_profile):
        result = gate.evaluate(make_profile(total_memory_bytes=MIN_MEMORY_BYTES))

        assert result.is_eligible

    def test_low_disk_is_ineligible(self, gate, make_profile):
        result = gate.evaluate(make_profile(free_disk_bytes=MIN_FREE_DISK_BYTES - 1))

        assert result.verdict == EligibilityVerdict.INELIGIBLE
        assert result.reasons[0].startswith("Disk")

    @pytest.mark.parametrize(
        "overrides, fragment",
        [
            ({"tpm_present": False}, "not present"),
            ({"tpm_enabled": False}, "not enabled"),
            ({"tpm_activated": False}, "not activated"),
            ({"tpm_spec_version": "1.2, 2, 3"}, "1.2, 2, 3"),
            ({"tpm_spec_version": ""}, "does not include 2.0"),
        ],
    )
    def test_tpm_problems_are_ineligible(self, gate, make_profile, overrides, fragment):
        result = gate.evaluate(make_profile(**overrides))

        assert result.verdict == EligibilityVerdict.INELIGIBLE
        assert result.reasons[0].startswith("TPM")
        assert fragment in result.reasons[0]

    def test_reasons_keep_check_order(self, gate, make_profile):
        """RAM, disk and TPM failures are reported in that order."""
        profile = make_profile(
            total_memory_bytes=2 * GIB,
            free_disk_bytes=10 * GIB,
            tpm_present=False,
        )

        result = gate.evaluate(profile)

        assert [r.split(":")[0] for r in result.reasons] == ["RAM", "Disk", "TPM"]

    def test_skip_checks_is_always_eligible(self, gate, make_profile):
        """Skipping checks bypasses RAM, disk and TPM failures."""
        profile = make_profile(
            total_memory_bytes=1 * GIB,
            free_disk_bytes=1 * GIB,
            tpm_present=False,
            secure_boot_enabled=False,
        )

        result = gate.evaluate(profile, skip_checks=True)

        assert result.verdict == EligibilityVerdict.ELIGIBLE
        assert result.reasons == []
        assert any("skipped" in w for w in result.warnings)

    def test_skip_checks_logs_warning(self, gate, make_profile, caplog):
        with caplog.at_level(logging.WARNING, logger="upgrader.eligibility"):
            gate.evaluate(make_profile(), skip_checks=True)

        assert any(r.levelno == logging.WARNING for r in caplog.records)

    def test_secure_boot_off_only_warns_when_eligible(self, gate, make_profile):
        result = gate.evaluate(make_profile(secure_boot_enabled=False))

        assert result.verdict == EligibilityVerdict.ELIGIBLE
        assert result.reasons == []
        assert result.warnings == ["Secure Boot is not enabled"]

    def test_secure_boot_off_does_not_add_reason_when_ineligible(self, gate, make_profile):
        result = gate.evaluate(
            make_profile(total_memory_bytes=2 * GIB, secure_boot_enabled=False)
        )

        assert result.verdict == EligibilityVerdict.INELIGIBLE
        assert len(result.reasons) == 1
        assert not any("Secure Boot" in r for r in result.reasons)
        assert "Secure Boot is not enabled" in result.warnings
