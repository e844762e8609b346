"""Progress reporting service for stage-transition callbacks."""

import logging
from typing import Optional

import httpx

from upgrader.api.models import ReportPayload
from upgrader.models.status import StageEnum


class ReportService:
    """POSTs stage transitions to a management endpoint."""

    def __init__(self, report_url: str, timeout: float = 5.0):
        """Initialize report service.

        Args:
            report_url: Endpoint receiving ReportPayload JSON
            timeout: Request timeout in seconds
        """
        self.logger = logging.getLogger("upgrader.reporter")
        self.report_url = report_url
        self.timeout = timeout

    async def report_progress(
        self,
        stage: StageEnum,
        message: str,
        error: Optional[str] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        """Send a progress report.

        Args:
            stage: Current session stage
            message: Human-readable status description
            error: Error message if the session failed
            exit_code: Session exit code on the final report

        Note:
            Failures are logged but never raised; reporting must not change
            the course of the session
        """
        payload = ReportPayload(
            stage=stage,
            message=message,
            error=error,
            exit_code=exit_code,
        )

        self.logger.debug(f"Reporting: stage={stage.value}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.report_url,
                    json=payload.model_dump(mode="json"),
                )
                response.raise_for_status()
                self.logger.debug("Report sent successfully")

        except httpx.HTTPError as e:
            self.logger.warning(
                f"Failed to report progress to {self.report_url}: {e}. "
                f"Continuing upgrade session..."
            )
        except Exception as e:
            self.logger.error(
                f"Unexpected error reporting progress: {e}",
                exc_info=True,
            )
