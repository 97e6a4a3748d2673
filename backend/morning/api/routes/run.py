"""Timer run control endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from morning.api.deps import get_run_manager
from morning.api.schemas.run import RunExtendRequest, RunStartRequest, RunStateResponse
from morning.observability.tracing import trace
from morning.services.execution_timer import TimerError
from morning.services.plan_repository import PlanNotFoundError
from morning.services.run_manager import RunManager, RunView

router = APIRouter()


@router.get("/run", response_model=RunStateResponse, tags=["run"])
def get_run(http_request: Request, manager: RunManager = Depends(get_run_manager)) -> RunStateResponse:
    request_id = getattr(http_request.state, "request_id", None)
    return RunStateResponse.from_view(manager.view(), request_id)


@router.post("/run/start", response_model=RunStateResponse, tags=["run"])
def start_run(
    payload: RunStartRequest,
    http_request: Request,
    manager: RunManager = Depends(get_run_manager),
) -> RunStateResponse:
    """Start the timer for a stored plan, replacing any run in progress."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("run.start", plan_date=payload.date.isoformat(), request_id=request_id):
        view = _call(manager.start_run, payload.date)
    return RunStateResponse.from_view(view, request_id)


@router.post("/run/pause", response_model=RunStateResponse, tags=["run"])
def pause_run(http_request: Request, manager: RunManager = Depends(get_run_manager)) -> RunStateResponse:
    return _control(http_request, "pause", manager.pause)


@router.post("/run/resume", response_model=RunStateResponse, tags=["run"])
def resume_run(http_request: Request, manager: RunManager = Depends(get_run_manager)) -> RunStateResponse:
    return _control(http_request, "resume", manager.resume)


@router.post("/run/skip", response_model=RunStateResponse, tags=["run"])
def skip_task(http_request: Request, manager: RunManager = Depends(get_run_manager)) -> RunStateResponse:
    return _control(http_request, "skip", manager.skip)


@router.post("/run/extend", response_model=RunStateResponse, tags=["run"])
def extend_task(
    http_request: Request,
    payload: RunExtendRequest | None = None,
    manager: RunManager = Depends(get_run_manager),
) -> RunStateResponse:
    seconds = payload.seconds if payload else RunExtendRequest().seconds
    return _control(http_request, "extend", manager.extend, seconds)


@router.delete("/run", status_code=status.HTTP_204_NO_CONTENT, tags=["run"])
def stop_run(http_request: Request, manager: RunManager = Depends(get_run_manager)) -> Response:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("run.stop", request_id=request_id):
        manager.stop_run()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _control(http_request: Request, action: str, operation, *args) -> RunStateResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(f"run.{action}", request_id=request_id):
        view = _call(operation, *args)
    return RunStateResponse.from_view(view, request_id)


def _call(operation, *args) -> RunView:
    try:
        return operation(*args)
    except PlanNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Plan not found")
    except (TimerError, RuntimeError) as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
