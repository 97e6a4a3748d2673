"""Task template API routes."""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session

from morning.api.schemas.template import TemplateCreateRequest, TemplateSummary, TemplateUpdateRequest
from morning.db.deps import get_db
from morning.db.models.task_template import TaskTemplate
from morning.observability.metrics import log_metric
from morning.observability.tracing import trace
from morning.services.plan_repository import PlanRepository, TemplateNotFoundError

router = APIRouter()


@router.get("/templates", response_model=List[TemplateSummary], tags=["templates"])
def list_templates(http_request: Request, db: Session = Depends(get_db)) -> List[TemplateSummary]:
    """List templates, seeding the defaults when none exist yet."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("template.list", metadata={"route": "/templates"}, request_id=request_id):
        templates = PlanRepository(db).list_templates()
    log_metric("template.list.count", len(templates))
    return [_serialize_template(template) for template in templates]


@router.post(
    "/templates",
    response_model=TemplateSummary,
    status_code=status.HTTP_201_CREATED,
    tags=["templates"],
)
def create_template(
    payload: TemplateCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TemplateSummary:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("template.create", metadata={"route": "/templates"}, request_id=request_id):
        try:
            template = PlanRepository(db).add_template(payload.name, payload.default_minutes)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    log_metric("template.create.success", 1, metadata={"template_id": template.id})
    return _serialize_template(template)


@router.patch("/templates/{template_id}", response_model=TemplateSummary, tags=["templates"])
def update_template(
    template_id: str,
    payload: TemplateUpdateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> TemplateSummary:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("template.update", metadata={"template_id": template_id}, request_id=request_id):
        try:
            template = PlanRepository(db).update_template(
                template_id,
                name=payload.name,
                default_minutes=payload.default_minutes,
            )
        except TemplateNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    log_metric("template.update.success", 1, metadata={"template_id": template_id})
    return _serialize_template(template)


@router.delete("/templates/{template_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["templates"])
def delete_template(template_id: str, http_request: Request, db: Session = Depends(get_db)) -> Response:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("template.delete", metadata={"template_id": template_id}, request_id=request_id):
        try:
            PlanRepository(db).delete_template(template_id)
        except TemplateNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    log_metric("template.delete.success", 1, metadata={"template_id": template_id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _serialize_template(template: TaskTemplate) -> TemplateSummary:
    return TemplateSummary(id=template.id, name=template.name, default_minutes=template.default_minutes)
