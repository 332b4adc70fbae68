"""Service-layer errors. Routers translate these into HTTP responses."""
from typing import List, Optional


class ComplianceServiceError(Exception):
    """Raised when a ledger operation cannot be carried out."""
    status_code = 400


class NotFoundError(ComplianceServiceError):
    """Referenced route or pool does not exist."""
    status_code = 404


class InvalidRequestError(ComplianceServiceError):
    """Request breaks a business rule (amount, surplus, membership)."""
    status_code = 400


class PoolValidationError(ComplianceServiceError):
    """Allocated pool failed the Article 21 checks."""
    status_code = 400

    def __init__(self, errors: Optional[List[str]] = None):
        super().__init__("Pool validation failed")
        self.errors = list(errors or [])
