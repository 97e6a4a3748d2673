"""FastAPI dependencies for process-wide services."""
from __future__ import annotations

from fastapi import HTTPException, Request, status

from morning.core.clock import Clock, system_clock
from morning.services.run_manager import RunManager


def get_run_manager(request: Request) -> RunManager:
    manager = getattr(request.app.state, "run_manager", None)
    if manager is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Timer service not started")
    return manager


def get_clock(request: Request) -> Clock:
    """Sampled wall clock when the app is running, else the system clock."""
    return getattr(request.app.state, "wall_clock", None) or system_clock
