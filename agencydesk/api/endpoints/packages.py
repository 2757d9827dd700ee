"""
Package Catalog API Endpoints

Any signed-in user can browse the catalog; sub-package prices are only
returned to users who manage packages.
"""

from typing import List, Optional, Union

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.api.dependencies import get_auth_user, get_db, require_permission
from agencydesk.core.permissions import Permission, has_any_permission
from agencydesk.schemas.auth import AuthUser
from agencydesk.schemas.package import (
    MainPackage,
    MainPackageCreate,
    MainPackageUpdate,
    SubPackage,
    SubPackageCreate,
    SubPackagePublic,
    SubPackageUpdate,
)
from agencydesk.services import catalog

router = APIRouter()

can_create = require_permission(Permission.CREATE_PACKAGES)
can_edit = require_permission(Permission.EDIT_PACKAGES)


def _project(user: AuthUser, package: SubPackage) -> Union[SubPackage, SubPackagePublic]:
    if has_any_permission(user, Permission.CREATE_PACKAGES, Permission.EDIT_PACKAGES):
        return package
    return SubPackagePublic.model_validate(package.model_dump())


# ==================== Main packages ====================

@router.get("/main", response_model=List[MainPackage])
async def list_main_packages(
    active_only: bool = Query(False),
    user: AuthUser = Depends(get_auth_user),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.list_main_packages(db, active_only=active_only)


@router.post("/main", response_model=MainPackage, status_code=status.HTTP_201_CREATED)
async def create_main_package(
    data: MainPackageCreate,
    user: AuthUser = Depends(can_create),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.add_main_package(db, data)


@router.patch("/main/{package_id}", response_model=MainPackage)
async def update_main_package(
    package_id: str,
    data: MainPackageUpdate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.update_main_package(db, package_id, data)


@router.delete("/main/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_main_package(
    package_id: str,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    """Deletes the main package together with its sub-packages."""
    await catalog.delete_main_package(db, package_id)


# ==================== Sub packages ====================

@router.get("/sub", response_model=List[Union[SubPackage, SubPackagePublic]])
async def list_sub_packages(
    main_package_id: Optional[str] = Query(None),
    active_only: bool = Query(False),
    user: AuthUser = Depends(get_auth_user),
    db: AsyncSession = Depends(get_db)
):
    packages = await catalog.list_sub_packages(db, main_package_id, active_only)
    return [_project(user, p) for p in packages]


@router.post("/sub", response_model=SubPackage, status_code=status.HTTP_201_CREATED)
async def create_sub_package(
    data: SubPackageCreate,
    user: AuthUser = Depends(can_create),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.add_sub_package(db, data)


@router.patch("/sub/{package_id}", response_model=SubPackage)
async def update_sub_package(
    package_id: str,
    data: SubPackageUpdate,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    return await catalog.update_sub_package(db, package_id, data)


@router.delete("/sub/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sub_package(
    package_id: str,
    user: AuthUser = Depends(can_edit),
    db: AsyncSession = Depends(get_db)
):
    await catalog.delete_sub_package(db, package_id)
