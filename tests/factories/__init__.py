"""
Data factories for test data generation.

Factories use factory-boy to create realistic test data with sensible defaults.
ORM factories support async creation via create_async(); the *RecordFactory
classes build the pydantic records used by the computation core.

Usage:
    from tests.factories import UserFactory, ClientFactory

    # Create user
    user = await UserFactory.create_async(db_session, role="admin")

    # Build a client record for a pure aggregation test
    client = ClientRecordFactory(services=[ServiceRecordFactory(price=300)])
"""

from tests.factories.user import UserFactory, DEFAULT_PASSWORD
from tests.factories.client import (
    ClientFactory,
    ClientServiceFactory,
    ClientRecordFactory,
    ServiceRecordFactory,
)
from tests.factories.invoice import (
    InvoiceFactory,
    FinanceTransactionFactory,
    InvoiceRecordFactory,
    TransactionRecordFactory,
)
from tests.factories.catalog import MainPackageFactory, SubPackageFactory
from tests.factories.staff import EmployeeFactory, GoalFactory

__all__ = [
    "UserFactory",
    "DEFAULT_PASSWORD",
    "ClientFactory",
    "ClientServiceFactory",
    "ClientRecordFactory",
    "ServiceRecordFactory",
    "InvoiceFactory",
    "FinanceTransactionFactory",
    "InvoiceRecordFactory",
    "TransactionRecordFactory",
    "MainPackageFactory",
    "SubPackageFactory",
    "EmployeeFactory",
    "GoalFactory",
]
