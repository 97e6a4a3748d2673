"""Schemas for the morning (execution day) view."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from morning.api.schemas.plan import DateOption
from morning.api.schemas.schedule import ScheduleResponse


class MorningViewResponse(BaseModel):
    selected_date: date
    date_label: str
    available_dates: List[DateOption]
    has_plan: bool
    now: datetime
    now_label: str
    schedule: Optional[ScheduleResponse]
    active_index: Optional[int]
    time_to_departure_seconds: int
    request_id: str
