"""Entry points for the upgrade orchestrator: CLI session and status API."""

import argparse
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional, Sequence

from fastapi import FastAPI
import uvicorn

from upgrader.api.routes import router
from upgrader.models.config import UpgradeConfig
from upgrader.models.status import ExitCode
from upgrader.services.orchestrator import SessionOrchestrator
from upgrader.services.state_manager import StateManager
from upgrader.utils.logging import setup_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown hooks.

    Startup:
    - Initialize the session logger at the configured log path
    - Initialize StateManager singleton
    """
    config: UpgradeConfig = app.state.config
    logger = setup_logger("upgrader", str(config.log_path), level=logging.INFO)
    logger.info("Upgrader service starting up...")

    StateManager()
    logger.info(f"Media source: {config.remote_media_source}")

    yield

    logger.info("Upgrader service shutting down...")


app = FastAPI(
    title="Upgrader",
    description="Unattended in-place OS upgrade orchestrator",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "upgrader", "version": "1.0.0"}


def build_parser() -> argparse.ArgumentParser:
    defaults = UpgradeConfig(remote_media_source="unused")
    parser = argparse.ArgumentParser(
        prog="upgrader",
        description="Stage installation media and run an unattended in-place OS upgrade.",
    )
    parser.add_argument(
        "--remote-source",
        dest="remote_media_source",
        required=True,
        help="UNC/filesystem path or http(s) URL of the installation image",
    )
    parser.add_argument(
        "--local-media",
        dest="local_media_path",
        default=str(defaults.local_media_path),
        help="Where to stage the image (default: %(default)s)",
    )
    parser.add_argument(
        "--log-path",
        dest="log_path",
        default=str(defaults.log_path),
        help="Session log file (default: %(default)s)",
    )
    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Bypass RAM/disk/TPM/Secure Boot prerequisite checks",
    )
    parser.add_argument(
        "--keep-media",
        action="store_true",
        help="Keep the staged image after the session",
    )
    parser.add_argument(
        "--report-url",
        default=None,
        help="Endpoint notified on every stage transition",
    )
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the status API instead of a single session",
    )
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=12316)
    return parser


async def run_session(config: UpgradeConfig) -> int:
    """Run one upgrade session and return its process exit code."""
    orchestrator = SessionOrchestrator(config)
    outcome = await orchestrator.run()
    return int(outcome.exit_code)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = UpgradeConfig(
            remote_media_source=args.remote_media_source,
            local_media_path=args.local_media_path,
            log_path=args.log_path,
            skip_checks=args.skip_checks,
            keep_media=args.keep_media,
            report_url=args.report_url,
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return int(ExitCode.UNEXPECTED)

    if args.serve:
        app.state.config = config
        uvicorn.run(
            app,
            host=args.host,
            port=args.port,
            log_level="info",
            access_log=True,
        )
        return int(ExitCode.SUCCESS)

    level = logging.DEBUG if args.verbose else logging.INFO
    try:
        setup_logger("upgrader", str(config.log_path), level=level)
    except OSError as e:
        print(f"Cannot open log file {config.log_path}: {e}", file=sys.stderr)
        return int(ExitCode.UNEXPECTED)

    return asyncio.run(run_session(config))


if __name__ == "__main__":
    sys.exit(main())
