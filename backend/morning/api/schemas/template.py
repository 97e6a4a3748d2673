"""Schemas for task template management."""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class TemplateSummary(BaseModel):
    id: str
    name: str
    default_minutes: int


class TemplateCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    default_minutes: int = Field(5, ge=1)


class TemplateUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    default_minutes: Optional[int] = Field(default=None, ge=1)
