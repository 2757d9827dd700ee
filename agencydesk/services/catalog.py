"""
Package catalog: main packages, their sub-packages, and the resolution of a
service's category labels against them.
"""

from typing import Any, Dict, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from agencydesk.core.currency import Currency
from agencydesk.core.exceptions import MalformedService, PackageNotFound
from agencydesk.core.logging import get_logger
from agencydesk.models.main_package import MainPackage as MainPackageModel
from agencydesk.models.sub_package import SubPackage as SubPackageModel
from agencydesk.schemas.client import ClientServiceCreate, ClientServiceUpdate
from agencydesk.schemas.package import (
    MainPackage,
    MainPackageCreate,
    MainPackageUpdate,
    SubPackage,
    SubPackageCreate,
    SubPackageUpdate,
)

logger = get_logger(__name__)

ServicePayload = TypeVar("ServicePayload", ClientServiceCreate, ClientServiceUpdate)


# ==================== Main packages ====================

async def _get_main_row(db: AsyncSession, package_id: str) -> MainPackageModel:
    result = await db.execute(select(MainPackageModel).where(MainPackageModel.id == package_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise PackageNotFound(package_id, "Main package")
    return row


async def list_main_packages(db: AsyncSession, active_only: bool = False) -> List[MainPackage]:
    query = select(MainPackageModel).order_by(MainPackageModel.order, MainPackageModel.name_en)
    if active_only:
        query = query.where(MainPackageModel.is_active.is_(True))
    result = await db.execute(query)
    return [MainPackage.model_validate(row) for row in result.scalars().all()]


async def add_main_package(db: AsyncSession, data: MainPackageCreate) -> MainPackage:
    row = MainPackageModel(**data.model_dump())
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return MainPackage.model_validate(row)


async def update_main_package(db: AsyncSession, package_id: str, patch: MainPackageUpdate) -> MainPackage:
    row = await _get_main_row(db, package_id)
    for key, value in patch.model_dump(exclude_unset=True).items():
        setattr(row, key, value)
    await db.commit()
    return MainPackage.model_validate(row)


async def delete_main_package(db: AsyncSession, package_id: str):
    """Delete a main package and its sub-packages. Services sold from it keep their labels."""
    row = await _get_main_row(db, package_id)
    await db.delete(row)
    await db.commit()
    logger.info(f"Main package {package_id} deleted")


# ==================== Sub packages ====================

async def _get_sub_row(db: AsyncSession, package_id: str) -> SubPackageModel:
    result = await db.execute(select(SubPackageModel).where(SubPackageModel.id == package_id))
    row = result.scalar_one_or_none()
    if row is None:
        raise PackageNotFound(package_id, "Sub package")
    return row


async def list_sub_packages(
    db: AsyncSession,
    main_package_id: Optional[str] = None,
    active_only: bool = False
) -> List[SubPackage]:
    query = select(SubPackageModel).order_by(SubPackageModel.order, SubPackageModel.name_en)
    if main_package_id is not None:
        query = query.where(SubPackageModel.main_package_id == main_package_id)
    if active_only:
        query = query.where(SubPackageModel.is_active.is_(True))
    result = await db.execute(query)
    return [SubPackage.model_validate(row) for row in result.scalars().all()]


async def add_sub_package(db: AsyncSession, data: SubPackageCreate) -> SubPackage:
    """
    Raises:
        PackageNotFound: if the parent main package does not exist
    """
    await _get_main_row(db, data.main_package_id)
    row = SubPackageModel(**data.model_dump(mode="json"))
    db.add(row)
    await db.commit()
    await db.refresh(row)
    return SubPackage.model_validate(row)


async def update_sub_package(db: AsyncSession, package_id: str, patch: SubPackageUpdate) -> SubPackage:
    row = await _get_sub_row(db, package_id)
    changes = patch.model_dump(mode="json", exclude_unset=True)
    if changes.get("main_package_id"):
        await _get_main_row(db, changes["main_package_id"])
    for key, value in changes.items():
        setattr(row, key, value)
    await db.commit()
    return SubPackage.model_validate(row)


async def delete_sub_package(db: AsyncSession, package_id: str):
    row = await _get_sub_row(db, package_id)
    await db.delete(row)
    await db.commit()


# ==================== Service resolution ====================

async def resolve_service_packages(db: AsyncSession, data: ServicePayload) -> ServicePayload:
    """
    Fill a service's category labels from the catalog entries it references.

    The main package's English name becomes `main_category` and the
    sub-package's becomes `sub_package`. A new service that leaves its price
    unset takes the sub-package's price and currency. Payloads without
    catalog references are returned unchanged.

    Raises:
        MalformedService: for unknown or inactive packages, or a sub-package
            that belongs to another main package
    """
    if not (data.main_package_id or data.sub_package_id):
        return data

    changes: Dict[str, Any] = {}
    main_id = data.main_package_id

    if data.sub_package_id:
        sub = await _lookup(db, SubPackageModel, data.sub_package_id)
        if main_id and sub.main_package_id != main_id:
            raise MalformedService(
                f"Sub package {sub.id} does not belong to main package {main_id}"
            )
        main_id = sub.main_package_id
        changes["sub_package"] = sub.name_en
        if isinstance(data, ClientServiceCreate) and "price" not in data.model_fields_set:
            changes["price"] = sub.price
            changes["currency"] = Currency(sub.currency)

    main = await _lookup(db, MainPackageModel, main_id)
    changes["main_package_id"] = main.id
    changes["main_category"] = main.name_en
    return data.model_copy(update=changes)


async def _lookup(db: AsyncSession, model, package_id: str):
    row = await db.get(model, package_id)
    if row is None:
        raise MalformedService(f"Unknown package {package_id}")
    if not row.is_active:
        raise MalformedService(f"Package {package_id} is inactive")
    return row
