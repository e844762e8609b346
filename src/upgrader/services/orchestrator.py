"""Session orchestrator: runs the upgrade pipeline and guarantees cleanup."""

from pathlib import Path
from typing import Optional
import logging

from upgrader.models.config import UpgradeConfig
from upgrader.models.errors import (
    AlreadyCurrent,
    InstallerNonZeroExit,
    LocalMediaUnwritable,
    MediaSizeMismatch,
    MediaUnreachable,
    NotElevated,
    PolicyUnlockFailure,
    PrerequisiteFailure,
    UnexpectedFailure,
    UpgradeError,
)
from upgrader.models.results import UpgradeOutcome
from upgrader.models.status import (
    EligibilityVerdict,
    ExitCode,
    OutcomeStatus,
    StageEnum,
    StagingFailure,
)
from upgrader.platform.base import ProfileReader
from upgrader.platform.windows import WindowsProfileReader
from upgrader.services.eligibility import EligibilityGate
from upgrader.services.invoker import UpgradeInvoker
from upgrader.services.mounter import ImageMounter
from upgrader.services.policy import PolicyUnlocker
from upgrader.services.profiler import SystemProfiler
from upgrader.services.reporter import ReportService
from upgrader.services.staging import MediaStager
from upgrader.services.state_manager import StateManager
from upgrader.utils.logging import log_success


class SessionOrchestrator:
    """Sequences the upgrade stages for one session.

    Stages run strictly in order. The first failure stops the pipeline and
    decides the exit code; the finalizer runs exactly once on every exit
    path, exceptions included.
    """

    def __init__(
        self,
        config: UpgradeConfig,
        reader: Optional[ProfileReader] = None,
        profiler: Optional[SystemProfiler] = None,
        gate: Optional[EligibilityGate] = None,
        unlocker: Optional[PolicyUnlocker] = None,
        stager: Optional[MediaStager] = None,
        mounter: Optional[ImageMounter] = None,
        invoker: Optional[UpgradeInvoker] = None,
        state_manager: Optional[StateManager] = None,
        reporter: Optional[ReportService] = None,
    ):
        """Initialize session orchestrator.

        Args:
            config: Session configuration
            reader: Platform reader used for the elevation check and profiling
            profiler, gate, unlocker, stager, mounter, invoker: Stage services
                (real implementations if None)
            state_manager: StateManager instance (uses singleton if None)
            reporter: ReportService (built from config.report_url if None)
        """
        self.logger = logging.getLogger("upgrader.session")
        self.config = config
        self.reader = reader or WindowsProfileReader()
        self.profiler = profiler or SystemProfiler(self.reader)
        self.gate = gate or EligibilityGate()
        self.unlocker = unlocker or PolicyUnlocker()
        self.stager = stager or MediaStager()
        self.mounter = mounter or ImageMounter()
        self.invoker = invoker or UpgradeInvoker()
        self.state_manager = state_manager or StateManager()
        if reporter is None and config.report_url:
            reporter = ReportService(config.report_url)
        self.reporter = reporter

        self._stage = StageEnum.INIT
        self._mount_attempted = False

    @property
    def media_path(self) -> Path:
        return Path(self.config.local_media_path)

    async def run(self) -> UpgradeOutcome:
        """Run the whole pipeline.

        Returns:
            UpgradeOutcome; exit_code follows the stage that stopped the run
        """
        self.logger.info("=== Upgrade session started ===")
        self.logger.info(
            f"Media source: {self.config.remote_media_source}, "
            f"local copy: {self.media_path}, log: {self.config.log_path}"
        )
        self.state_manager.begin()

        outcome: Optional[UpgradeOutcome] = None
        try:
            try:
                outcome = await self._run_stages()
            except AlreadyCurrent as e:
                message = f"{e}, nothing to do"
                log_success(self.logger, message)
                outcome = self._outcome(
                    ExitCode.SUCCESS, OutcomeStatus.ALREADY_CURRENT, message
                )
            except UpgradeError as e:
                self.logger.error(f"Stage {self._stage.value} failed: {e}")
                outcome = self._failure(e)
            except Exception as e:
                self.logger.error(
                    f"Unexpected failure in stage {self._stage.value}: {e}",
                    exc_info=True,
                )
                outcome = self._failure(UnexpectedFailure(e))
        finally:
            await self._finalize(outcome)

        return outcome

    async def _run_stages(self) -> UpgradeOutcome:
        await self._enter(StageEnum.ELEVATION_CHECK, "Checking administrator privileges")
        if not await self.reader.is_elevated():
            raise NotElevated("administrator privileges are required")

        await self._enter(StageEnum.ALREADY_UPGRADED_CHECK, "Reading system profile")
        profile = await self.profiler.capture()
        result = self.gate.evaluate(profile, skip_checks=self.config.skip_checks)
        if result.verdict == EligibilityVerdict.ALREADY_UPGRADED:
            raise AlreadyCurrent(profile.build_number)

        await self._enter(StageEnum.ELIGIBILITY, "Validating prerequisites")
        if result.verdict == EligibilityVerdict.INELIGIBLE:
            raise PrerequisiteFailure(result.reasons)

        await self._enter(StageEnum.POLICY_UNLOCK, "Removing upgrade policy blocks")
        if not self.unlocker.remove_blocks():
            raise PolicyUnlockFailure("could not remove upgrade policy blocks")

        await self._enter(StageEnum.MEDIA_STAGING, "Staging installation media")
        staging = await self.stager.stage(self.config.remote_media_source, self.media_path)
        if not staging.succeeded:
            if staging.failure == StagingFailure.MEDIA_SIZE_MISMATCH:
                raise MediaSizeMismatch(staging.error or "size mismatch after copy")
            if staging.failure == StagingFailure.LOCAL_MEDIA_UNWRITABLE:
                raise LocalMediaUnwritable(staging.error or "local staging path not writable")
            raise MediaUnreachable(staging.error or "media source unreachable")
        self.logger.info(f"Media staging result: {staging.action.value}")

        await self._enter(StageEnum.MOUNT, "Mounting installation media")
        self._mount_attempted = True
        media = await self.mounter.mount(self.media_path)

        await self._enter(StageEnum.INVOKE, "Running installer")
        installer_exit_code = await self.invoker.invoke(media.installer_path)
        if installer_exit_code != 0:
            raise InstallerNonZeroExit(installer_exit_code)

        await self._enter(StageEnum.DONE, "Upgrade started")
        message = "Upgrade started successfully"
        log_success(self.logger, message)
        return self._outcome(
            ExitCode.SUCCESS,
            OutcomeStatus.UPGRADE_STARTED,
            message,
            installer_exit_code=0,
        )

    async def _finalize(self, outcome: Optional[UpgradeOutcome]) -> None:
        """Unmount, optionally delete the staged media, write the final log line.

        Every cleanup step is best-effort; nothing here raises.
        """
        try:
            await self.mounter.unmount(self.media_path)
        except Exception as e:
            # Nothing mounted unless the mount stage ran
            if self._mount_attempted:
                self.logger.warning(f"Failed to unmount {self.media_path}: {e}")
            else:
                self.logger.debug(f"Unmount skipped: {e}")

        if self.config.keep_media:
            self.logger.info(f"Keeping staged media at {self.media_path}")
        else:
            try:
                if self.media_path.exists():
                    self.media_path.unlink()
                    self.logger.info(f"Deleted staged media {self.media_path}")
            except OSError as e:
                self.logger.warning(f"Failed to delete staged media {self.media_path}: {e}")

        if outcome is None:
            self.logger.error(f"Session aborted in stage {self._stage.value}")
            return

        self.state_manager.finish(outcome)
        if outcome.succeeded:
            log_success(
                self.logger,
                f"=== Session finished: {outcome.status.value}, exit code {int(outcome.exit_code)} ===",
            )
        else:
            self.logger.error(
                f"=== Session finished: {outcome.status.value}, exit code {int(outcome.exit_code)} ==="
            )

        if self.reporter:
            await self.reporter.report_progress(
                stage=outcome.stage,
                message=outcome.message,
                error=None if outcome.succeeded else outcome.message,
                exit_code=int(outcome.exit_code),
            )

    async def _enter(self, stage: StageEnum, message: str) -> None:
        self._stage = stage
        self.logger.info(f"[{stage.value}] {message}")
        self.state_manager.update_status(stage=stage, message=message)
        if self.reporter:
            await self.reporter.report_progress(stage=stage, message=message)

    def _failure(self, error: UpgradeError) -> UpgradeOutcome:
        return self._outcome(
            error.exit_code,
            error.status,
            str(error),
            installer_exit_code=getattr(error, "installer_exit_code", None),
            reasons=getattr(error, "reasons", []),
        )

    def _outcome(
        self,
        exit_code: ExitCode,
        status: OutcomeStatus,
        message: str,
        installer_exit_code: Optional[int] = None,
        reasons: Optional[list[str]] = None,
    ) -> UpgradeOutcome:
        return UpgradeOutcome(
            exit_code=exit_code,
            status=status,
            stage=self._stage,
            log_path=self.config.log_path,
            message=message,
            installer_exit_code=installer_exit_code,
            reasons=reasons or [],
        )
