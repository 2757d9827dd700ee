"""
Employee directory.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.core.exceptions import EmployeeNotFound
from agencydesk.core.logging import get_logger
from agencydesk.models.employee import Employee as EmployeeModel
from agencydesk.schemas.employee import Employee, EmployeeCreate, EmployeeUpdate

logger = get_logger(__name__)


async def _get_employee_row(db: AsyncSession, employee_id: str) -> EmployeeModel:
    result = await db.execute(select(EmployeeModel).where(EmployeeModel.id == employee_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise EmployeeNotFound(employee_id)
    return row


async def list_employees(db: AsyncSession, active_only: bool = False) -> List[Employee]:
    query = select(EmployeeModel).order_by(EmployeeModel.name)
    if active_only:
        query = query.where(EmployeeModel.is_active.is_(True))
    result = await db.execute(query)
    return [Employee.model_validate(row) for row in result.scalars().all()]


async def get_employee(db: AsyncSession, employee_id: str) -> Employee:
    return Employee.model_validate(await _get_employee_row(db, employee_id))


async def add_employee(db: AsyncSession, data: EmployeeCreate) -> Employee:
    """
    Raises:
        IntegrityError: if another employee already uses the email
    """
    values = data.model_dump(mode="json")
    values["email"] = values["email"].lower()
    values["start_date"] = data.start_date
    row = EmployeeModel(**values)
    db.add(row)
    await db.commit()
    await db.refresh(row)
    logger.info(f"Employee {row.id} created")
    return Employee.model_validate(row)


async def update_employee(
    db: AsyncSession,
    employee_id: str,
    patch: EmployeeUpdate,
    manager: bool = True
) -> Employee:
    """
    Apply a partial update.

    When `manager` is False (an employee editing their own profile) the
    compensation and job fields in `EmployeeUpdate.ADMIN_FIELDS` are ignored.
    """
    row = await _get_employee_row(db, employee_id)
    exclude = set() if manager else set(EmployeeUpdate.ADMIN_FIELDS)
    changes = patch.model_dump(mode="json", exclude_unset=True, exclude=exclude)
    if patch.start_date is not None and "start_date" in changes:
        changes["start_date"] = patch.start_date
    if changes.get("email"):
        changes["email"] = changes["email"].lower()
    for key, value in changes.items():
        setattr(row, key, value)
    await db.commit()
    return Employee.model_validate(row)


async def delete_employee(db: AsyncSession, employee_id: str):
    row = await _get_employee_row(db, employee_id)
    await db.delete(row)
    await db.commit()
    logger.info(f"Employee {employee_id} deleted")
