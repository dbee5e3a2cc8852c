"""
Plan API endpoints
"""

from fastapi import APIRouter, Depends, status
from typing import List, Optional
import structlog
import uuid

from menuhost.api.errors import to_http_exception
from menuhost.core.dependencies import get_plan_catalog, require_permission
from menuhost.core.exceptions import MenuHostError
from menuhost.core.permissions import Permission
from menuhost.schemas.pagination import Page, PageQuery
from menuhost.schemas.plan import PlanCreate, PlanRead, PlanStatistics, PlanUpdate
from menuhost.schemas.token import Principal
from menuhost.services.plan_catalog import PlanCatalog

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/public", response_model=List[PlanRead])
async def list_public_plans(plans: PlanCatalog = Depends(get_plan_catalog)):
    """Plans on sale, cheapest first"""
    return plans.list_public_plans()


@router.get("/statistics", response_model=PlanStatistics)
async def get_plan_statistics(
    principal: Principal = Depends(require_permission(Permission.PLAN_VIEW_ANY)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Aggregates over non-archived plans"""
    return plans.statistics()


@router.get("/", response_model=Page[PlanRead])
async def list_plans(
    query: PageQuery = Depends(),
    is_archived: Optional[bool] = None,
    principal: Principal = Depends(require_permission(Permission.PLAN_VIEW_ANY)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Paginated plan listing"""
    try:
        return plans.list_plans(query, is_archived=is_archived)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.get("/{plan_id}", response_model=PlanRead)
async def get_plan(
    plan_id: uuid.UUID,
    principal: Principal = Depends(require_permission(Permission.PLAN_VIEW_ANY)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Get plan by ID"""
    try:
        return plans.find_by_id(plan_id)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.post("/", response_model=PlanRead, status_code=status.HTTP_201_CREATED)
async def create_plan(
    data: PlanCreate,
    principal: Principal = Depends(require_permission(Permission.PLAN_MANAGE)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Create a new plan"""
    try:
        return plans.create_plan(data)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.put("/{plan_id}", response_model=PlanRead)
async def update_plan(
    plan_id: uuid.UUID,
    data: PlanUpdate,
    principal: Principal = Depends(require_permission(Permission.PLAN_MANAGE)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Update plan"""
    try:
        return plans.update_plan(plan_id, data)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_plan(
    plan_id: uuid.UUID,
    principal: Principal = Depends(require_permission(Permission.PLAN_MANAGE)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Delete a plan that no subscription references"""
    try:
        plans.delete_plan(plan_id)
    except MenuHostError as e:
        raise to_http_exception(e)


@router.patch("/{plan_id}/archive", response_model=PlanRead)
async def toggle_plan_archive(
    plan_id: uuid.UUID,
    principal: Principal = Depends(require_permission(Permission.PLAN_MANAGE)),
    plans: PlanCatalog = Depends(get_plan_catalog),
):
    """Archive or unarchive a plan"""
    try:
        return plans.toggle_archive(plan_id)
    except MenuHostError as e:
        raise to_http_exception(e)
