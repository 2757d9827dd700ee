"""
Goals API Endpoints
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_db, get_today, require_permission
from agencydesk.core.aggregations import goal_summary, goals_for_month
from agencydesk.core.permissions import Permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.goal import Goal, GoalCreate, GoalSummary, GoalUpdate
from agencydesk.services import goals

router = APIRouter()

can_view = require_permission(Permission.VIEW_GOALS, Permission.EDIT_GOALS)
can_edit = require_permission(Permission.EDIT_GOALS)


@router.get("/", response_model=List[Goal])
async def list_goals(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2020),
    user: AuthUser = Depends(can_view),
    db: AsyncSession = Depends(get_db)
):
    return await goals.list_goals(db, month=month, year=year)


@router.get("/summary", response_model=GoalSummary)
async def get_goal_summary(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2020),
    user: AuthUser = Depends(can_view),
    db: AsyncSession = Depends(get_db),
    today: date = Depends(get_today)
):
    """Counts for one month, the current month by default."""
    selected = goals_for_month(await goals.list_goals(db), month or today.month, year or today.year)
    return goal_summary(selected)


@router.post("/", response_model=Goal, status_code=status.HTTP_201_CREATED)
async def create_goal(
    data: GoalCreate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    return await goals.add_goal(db, data)


@router.get("/{goal_id}", response_model=Goal)
async def get_goal(
    goal_id: str,
    user: AuthUser = Depends(can_view),
    db: AsyncSession = Depends(get_db)
):
    return await goals.get_goal(db, goal_id)


@router.patch("/{goal_id}", response_model=Goal)
async def update_goal(
    goal_id: str,
    data: GoalUpdate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    return await goals.update_goal(db, goal_id, data)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(
    goal_id: str,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    await goals.delete_goal(db, goal_id)
