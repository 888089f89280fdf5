from fastapi import APIRouter

from app.api.dependencies import SchedulerDep
from app.schemas.system import AutomaticStatusResponse

router = APIRouter()


@router.post("/start-automatic-status", response_model=AutomaticStatusResponse)
async def start_automatic_status(scheduler: SchedulerDep) -> AutomaticStatusResponse:
    scheduler.start()
    return AutomaticStatusResponse(
        message="Automatic status management started", running=scheduler.is_running
    )


@router.post("/stop-automatic-status", response_model=AutomaticStatusResponse)
async def stop_automatic_status(scheduler: SchedulerDep) -> AutomaticStatusResponse:
    await scheduler.stop()
    return AutomaticStatusResponse(
        message="Automatic status management stopped", running=scheduler.is_running
    )


@router.get("/automatic-status", response_model=AutomaticStatusResponse)
async def automatic_status(scheduler: SchedulerDep) -> AutomaticStatusResponse:
    running = scheduler.is_running
    state = "running" if running else "stopped"
    return AutomaticStatusResponse(
        message=f"Automatic status management is {state}", running=running
    )
