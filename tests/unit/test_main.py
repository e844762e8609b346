"""Unit tests for the command-line entry point."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from upgrader import main as main_module
from upgrader.main import build_parser, main, run_session
from upgrader.models.results import UpgradeOutcome
from upgrader.models.status import ExitCode, OutcomeStatus, StageEnum

SOURCE = "\\\\fileserver\\media\\Win11_23H2_x64.iso"


@pytest.mark.unit
class TestBuildParser:
    """Test argument parsing."""

    def test_defaults(self):
        args = build_parser().parse_args(["--remote-source", SOURCE])

        assert args.remote_media_source == SOURCE
        assert args.skip_checks is False
        assert args.keep_media is False
        assert args.report_url is None
        assert args.serve is False
        assert args.port == 12316
        assert args.local_media_path.endswith("install.iso")

    def test_flags(self):
        args = build_parser().parse_args([
            "--remote-source", SOURCE,
            "--local-media", "D:\\stage\\win11.iso",
            "--log-path", "D:\\logs\\upgrade.log",
            "--skip-checks", "--keep-media", "--verbose",
        ])

        assert args.local_media_path == "D:\\stage\\win11.iso"
        assert args.log_path == "D:\\logs\\upgrade.log"
        assert args.skip_checks and args.keep_media and args.verbose

    def test_remote_source_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


@pytest.mark.unit
class TestMain:
    """Test main() exit code mapping."""

    @pytest.fixture
    def mock_logger(self):
        with patch("upgrader.main.setup_logger") as mock_log:
            mock_log.return_value = MagicMock()
            yield mock_log

    def test_returns_session_exit_code(self, tmp_path, mock_logger):
        with patch("upgrader.main.run_session", AsyncMock(return_value=4)) as mock_run:
            code = main(["--remote-source", SOURCE, "--log-path", str(tmp_path / "u.log")])

        assert code == 4
        config = mock_run.call_args.args[0]
        assert config.remote_media_source == SOURCE
        assert config.log_path == tmp_path / "u.log"

    def test_verbose_sets_debug(self, tmp_path, mock_logger):
        with patch("upgrader.main.run_session", AsyncMock(return_value=0)):
            main(["--remote-source", SOURCE, "--log-path", str(tmp_path / "u.log"), "--verbose"])

        assert mock_logger.call_args.kwargs["level"] == main_module.logging.DEBUG

    def test_invalid_config_returns_99(self, capsys):
        code = main(["--remote-source", SOURCE, "--report-url", "ftp://nope"])

        assert code == ExitCode.UNEXPECTED
        assert "Invalid configuration" in capsys.readouterr().err

    def test_unopenable_log_returns_99(self, tmp_path, capsys):
        with patch("upgrader.main.setup_logger", side_effect=PermissionError(13, "denied")):
            code = main(["--remote-source", SOURCE, "--log-path", str(tmp_path / "u.log")])

        assert code == 99
        assert "Cannot open log file" in capsys.readouterr().err

    def test_serve_runs_uvicorn(self, tmp_path):
        with patch("upgrader.main.uvicorn.run") as mock_uvicorn:
            code = main(["--remote-source", SOURCE, "--serve", "--port", "9000"])

        assert code == 0
        assert mock_uvicorn.call_args.kwargs["port"] == 9000
        assert main_module.app.state.config.remote_media_source == SOURCE


@pytest.mark.unit
class TestRunSession:

    @pytest.mark.asyncio
    async def test_returns_outcome_exit_code(self, tmp_path):
        outcome = UpgradeOutcome(
            exit_code=ExitCode.PREREQUISITES_FAILED,
            status=OutcomeStatus.PREREQUISITES_FAILED,
            stage=StageEnum.ELIGIBILITY,
            log_path=Path(tmp_path / "u.log"),
        )
        config = MagicMock()

        with patch("upgrader.main.SessionOrchestrator") as MockOrch:
            MockOrch.return_value.run = AsyncMock(return_value=outcome)
            code = await run_session(config)

        assert code == 2
        MockOrch.assert_called_once_with(config)
