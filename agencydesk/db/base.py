from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import the models so they are registered on Base.metadata
from agencydesk.models import (  # noqa: E402,F401
    user,
    client,
    client_service,
    invoice,
    finance_transaction,
    main_package,
    sub_package,
    employee,
    goal,
)
