"""
Monthly goals.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.core.exceptions import GoalNotFound
from agencydesk.core.progress import goal_progress
from agencydesk.models.goal import Goal as GoalModel
from agencydesk.schemas.goal import Goal, GoalCreate, GoalUpdate


def _to_goal(row: GoalModel) -> Goal:
    goal = Goal.model_validate(row)
    return goal.model_copy(update={"progress": goal_progress(goal.current, goal.target)})


async def _get_goal_row(db: AsyncSession, goal_id: str) -> GoalModel:
    result = await db.execute(select(GoalModel).where(GoalModel.id == goal_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise GoalNotFound(goal_id)
    return row


async def list_goals(
    db: AsyncSession,
    month: Optional[int] = None,
    year: Optional[int] = None
) -> List[Goal]:
    query = select(GoalModel).order_by(GoalModel.year, GoalModel.month, GoalModel.created_at)
    if month is not None:
        query = query.where(GoalModel.month == month)
    if year is not None:
        query = query.where(GoalModel.year == year)
    result = await db.execute(query)
    return [_to_goal(row) for row in result.scalars().all()]


async def get_goal(db: AsyncSession, goal_id: str) -> Goal:
    return _to_goal(await _get_goal_row(db, goal_id))


async def add_goal(db: AsyncSession, data: GoalCreate) -> Goal:
    row = GoalModel(**data.model_dump(mode="json"))
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return _to_goal(row)


async def update_goal(db: AsyncSession, goal_id: str, patch: GoalUpdate) -> Goal:
    row = await _get_goal_row(db, goal_id)
    for key, value in patch.model_dump(mode="json", exclude_unset=True).items():
        setattr(row, key, value)
    await db.commit()
    return _to_goal(row)


async def delete_goal(db: AsyncSession, goal_id: str):
    row = await _get_goal_row(db, goal_id)
    await db.delete(row)
    await db.commit()
