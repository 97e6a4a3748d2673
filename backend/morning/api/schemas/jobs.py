"""Schemas for job operations endpoints."""
from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel


class JobRunRequest(BaseModel):
    job: Literal["runtime_cleanup"] = "runtime_cleanup"


class JobRunResponse(BaseModel):
    job: str
    runtime_cleared: bool
    active_date: Optional[date]
    request_id: str
