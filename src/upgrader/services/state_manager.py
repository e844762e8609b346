"""State manager for in-memory session status."""

from typing import Optional
import logging

from upgrader.api.models import ProgressData
from upgrader.models.results import UpgradeOutcome
from upgrader.models.status import StageEnum


class StateManager:
    """Singleton holding the status of the current (or last) session.

    Read by GET /progress; written by the orchestrator on every transition.
    Nothing is persisted: a re-run starts from scratch.
    """

    _instance: Optional["StateManager"] = None

    def __new__(cls):
        """Implement singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize state manager (only once due to singleton)."""
        if self._initialized:
            return

        self.logger = logging.getLogger("upgrader.state_manager")
        self.reset()
        self._initialized = True

    def get_status(self) -> ProgressData:
        """Get current status for GET /progress endpoint."""
        return ProgressData(
            stage=self._current_stage,
            running=self._running,
            message=self._current_message,
            error=self._current_error,
            exit_code=self._exit_code,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    def begin(self) -> None:
        """Mark a session as started."""
        self._running = True
        self._exit_code = None
        self._current_error = None
        self.update_status(StageEnum.INIT, "Upgrade session starting")

    def update_status(
        self,
        stage: StageEnum,
        message: str,
        error: Optional[str] = None,
    ) -> None:
        """Update in-memory status.

        Args:
            stage: Current session stage
            message: Human-readable description
            error: Error message if the session failed
        """
        self._current_stage = stage
        self._current_message = message
        self._current_error = error
        self.logger.debug(f"Status updated: stage={stage.value}, message={message}")

    def finish(self, outcome: UpgradeOutcome) -> None:
        """Record the terminal outcome of a session."""
        self._running = False
        self._exit_code = int(outcome.exit_code)
        self.update_status(
            stage=outcome.stage,
            message=outcome.message,
            error=None if outcome.succeeded else outcome.message,
        )

    def reset(self) -> None:
        """Reset to the idle state."""
        self._current_stage = StageEnum.INIT
        self._current_message = "Upgrader ready"
        self._current_error: Optional[str] = None
        self._exit_code: Optional[int] = None
        self._running = False
