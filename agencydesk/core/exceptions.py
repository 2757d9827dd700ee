"""
Domain errors raised by the computation core and the client store.

The REST layer maps them to HTTP responses in `agencydesk.main`.
"""


class AgencyDeskError(Exception):
    """Base class for domain errors."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidCurrencyCode(AgencyDeskError, ValueError):
    """A currency code with no registered display metadata."""
    status_code = 422

    def __init__(self, code):
        super().__init__(f"Unsupported currency code: {code!r}")
        self.code = code


class MalformedService(AgencyDeskError, ValueError):
    """A service whose price or deliverable counters violate their invariants."""
    status_code = 422


class ClientNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, client_id: str):
        super().__init__(f"Client {client_id} not found")
        self.client_id = client_id


class ServiceNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, client_id: str, service_id: str):
        super().__init__(f"Service {service_id} not found for client {client_id}")
        self.client_id = client_id
        self.service_id = service_id


class InvoiceNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, invoice_id: str):
        super().__init__(f"Invoice {invoice_id} not found")
        self.invoice_id = invoice_id


class TransactionNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class PackageNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, package_id: str, kind: str = "Package"):
        super().__init__(f"{kind} {package_id} not found")
        self.package_id = package_id


class EmployeeNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, employee_id: str):
        super().__init__(f"Employee {employee_id} not found")
        self.employee_id = employee_id


class GoalNotFound(AgencyDeskError, LookupError):
    status_code = 404

    def __init__(self, goal_id: str):
        super().__init__(f"Goal {goal_id} not found")
        self.goal_id = goal_id
