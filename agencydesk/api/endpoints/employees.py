"""
Employees API Endpoints
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_auth_user, get_db, require_permission
from agencydesk.core.permissions import Permission, has_permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.employee import Employee, EmployeeCreate, EmployeePublic, EmployeeUpdate
from agencydesk.services import employees

router = APIRouter()

can_view = require_permission(Permission.VIEW_EMPLOYEES, Permission.EDIT_EMPLOYEES)
can_edit = require_permission(Permission.EDIT_EMPLOYEES)


def _is_self(user: AuthUser, employee: Employee) -> bool:
    return user.email.lower() == employee.email.lower()


def _project(user: AuthUser, employee: Employee) -> Union[Employee, EmployeePublic]:
    # Compensation is shown to employee managers and to the employee themself
    if has_permission(user, Permission.EDIT_EMPLOYEES) or _is_self(user, employee):
        return employee
    return EmployeePublic.model_validate(employee.model_dump())


def _duplicate_email(email: Optional[str]) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"An employee with email {email} already exists"
    )


@router.get("/", response_model=List[Union[Employee, EmployeePublic]])
async def list_employees(
    active_only: bool = Query(False),
    user: AuthUser = Depends(can_view),
    db: AsyncSession = Depends(get_db)
):
    return [_project(user, e) for e in await employees.list_employees(db, active_only)]


@router.post("/", response_model=Employee, status_code=status.HTTP_201_CREATED)
async def create_employee(
    data: EmployeeCreate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    try:
        return await employees.add_employee(db, data)
    except IntegrityError:
        await db.rollback()
        raise _duplicate_email(data.email)


@router.get("/{employee_id}", response_model=Union[Employee, EmployeePublic])
async def get_employee(
    employee_id: str,
    user: AuthUser = Depends(get_auth_user),
    db: AsyncSession = Depends(get_db)
):
    employee = await employees.get_employee(db, employee_id)
    if not (has_permission(user, Permission.VIEW_EMPLOYEES)
            or has_permission(user, Permission.EDIT_EMPLOYEES)
            or _is_self(user, employee)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view this employee")
    return _project(user, employee)


@router.patch("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    data: EmployeeUpdate,
    user: AuthUser = Depends(get_auth_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Update an employee.

    Employee managers may change every field. An employee editing their own
    profile may only change contact details; compensation and job fields in
    the patch are ignored.
    """
    manager = has_permission(user, Permission.EDIT_EMPLOYEES)
    if not manager and not _is_self(user, await employees.get_employee(db, employee_id)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to edit this employee")
    try:
        return await employees.update_employee(db, employee_id, data, manager=manager)
    except IntegrityError:
        await db.rollback()
        raise _duplicate_email(data.email)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_employee(
    employee_id: str,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    await employees.delete_employee(db, employee_id)
