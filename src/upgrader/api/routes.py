"""API route handlers for the upgrade status service."""

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from upgrader.api.models import ProgressResponse, SuccessResponse, UpgradeRequest
from upgrader.models.config import UpgradeConfig
from upgrader.services.orchestrator import SessionOrchestrator
from upgrader.services.state_manager import StateManager

router = APIRouter(prefix="/api/v1.0")


@router.get("/progress", response_model=ProgressResponse)
async def get_progress():
    """GET /api/v1.0/progress - Query the current upgrade session status.

    Response format (last session failed):
        {
            "code": 500,
            "msg": "Upgrade failed: MEDIA_UNREACHABLE: ...",
            "data": {
                "stage": "media_staging",
                "running": false,
                "message": "MEDIA_UNREACHABLE: ...",
                "error": "MEDIA_UNREACHABLE: ...",
                "exit_code": 4
            }
        }
    """
    state_manager = StateManager()
    status = state_manager.get_status()

    if status.exit_code not in (None, 0):
        msg = f"Upgrade failed: {status.error}" if status.error else "Upgrade failed"
        return ProgressResponse(code=500, msg=msg, data=status)
    return ProgressResponse(code=200, msg="success", data=status)


@router.post("/upgrade", response_model=SuccessResponse)
async def post_upgrade(
    request: Request, body: UpgradeRequest, background_tasks: BackgroundTasks
):
    """POST /api/v1.0/upgrade - Start an upgrade session in the background.

    Returns:
        code 200 if the session was started, code 409 if one is running
    """
    state_manager = StateManager()
    current_status = state_manager.get_status()

    if state_manager.is_running:
        return JSONResponse(
            status_code=200,
            content={
                "code": 409,
                "msg": f"Upgrade already in progress: {current_status.stage.value}",
                "stage": current_status.stage.value,
            },
        )

    base_config: UpgradeConfig = request.app.state.config
    try:
        config = UpgradeConfig.model_validate(
            {**base_config.model_dump(), **body.model_dump(exclude_none=True)}
        )
    except ValidationError as e:
        return JSONResponse(
            status_code=422,
            content={
                "code": 422,
                "msg": f"Invalid upgrade request: {e.errors()[0]['msg']}",
                "data": None,
            },
        )

    # Mark running before the task starts so a second request sees it
    state_manager.begin()
    background_tasks.add_task(_upgrade_workflow, config)

    return JSONResponse(
        status_code=200,
        content={"code": 200, "msg": "success", "data": None},
    )


async def _upgrade_workflow(config: UpgradeConfig) -> None:
    """Background task running one session."""
    orchestrator = SessionOrchestrator(config)
    # Outcome is recorded in StateManager by the orchestrator's finalizer
    await orchestrator.run()
