"""Unit tests for ReportService."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch
import httpx

from upgrader.services.reporter import ReportService
from upgrader.models.status import StageEnum


@pytest.mark.unit
class TestReportService:
    """Test ReportService in isolation."""

    @pytest.fixture
    def report_service(self):
        """Create ReportService instance."""
        return ReportService(report_url="http://mgmt:9080/api/v1.0/upgrade/report")

    @pytest.fixture
    def mock_client(self):
        mock_response = MagicMock()
        mock_response.raise_for_status = MagicMock()

        client = AsyncMock()
        client.post = AsyncMock(return_value=mock_response)
        client.__aenter__ = AsyncMock(return_value=client)
        client.__aexit__ = AsyncMock(return_value=None)
        return client

    def test_init(self, report_service):
        assert report_service.report_url == "http://mgmt:9080/api/v1.0/upgrade/report"
        assert report_service.timeout == 5.0

    @pytest.mark.asyncio
    async def test_report_progress_success(self, report_service, mock_client):
        """Test successful progress report."""
        with patch('httpx.AsyncClient', return_value=mock_client):
            await report_service.report_progress(
                stage=StageEnum.MEDIA_STAGING,
                message="Staging installation media",
            )

        mock_client.post.assert_called_once()
        call_args = mock_client.post.call_args
        assert call_args.args[0] == "http://mgmt:9080/api/v1.0/upgrade/report"
        assert call_args.kwargs["json"] == {
            "stage": "media_staging",
            "message": "Staging installation media",
            "error": None,
            "exit_code": None,
        }

    @pytest.mark.asyncio
    async def test_report_final_outcome(self, report_service, mock_client):
        with patch('httpx.AsyncClient', return_value=mock_client):
            await report_service.report_progress(
                stage=StageEnum.INVOKE,
                message="INSTALLER_NONZERO_EXIT: installer exited with code 3",
                error="INSTALLER_NONZERO_EXIT: installer exited with code 3",
                exit_code=6,
            )

        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["exit_code"] == 6
        assert payload["error"].startswith("INSTALLER_NONZERO_EXIT")

    @pytest.mark.asyncio
    async def test_report_progress_http_error(self, report_service, mock_client, caplog):
        """Test HTTP error is logged, not raised."""
        mock_client.post = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

        with patch('httpx.AsyncClient', return_value=mock_client):
            await report_service.report_progress(stage=StageEnum.MOUNT, message="Mounting")

        assert "Failed to report progress" in caplog.text

    @pytest.mark.asyncio
    async def test_report_progress_status_error(self, report_service, mock_client):
        request = httpx.Request("POST", report_service.report_url)
        response = httpx.Response(503, request=request)
        mock_client.post.return_value.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError("unavailable", request=request, response=response)
        )

        with patch('httpx.AsyncClient', return_value=mock_client):
            await report_service.report_progress(stage=StageEnum.MOUNT, message="Mounting")

    @pytest.mark.asyncio
    async def test_report_progress_unexpected_error(self, report_service, mock_client):
        """Test unexpected errors are swallowed too."""
        mock_client.post = AsyncMock(side_effect=RuntimeError("boom"))

        with patch('httpx.AsyncClient', return_value=mock_client):
            await report_service.report_progress(stage=StageEnum.DONE, message="done")
