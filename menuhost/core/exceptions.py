"""
Domain errors raised by the service layer

Routers translate these into HTTP responses (see menuhost.api.errors).
"""

from typing import Optional


class MenuHostError(Exception):
    """Base class for expected service-layer failures"""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        rolled_back: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        self.rolled_back = rolled_back

    def with_rollback(self) -> "MenuHostError":
        """Return a copy of this error flagged as rolled back"""
        return type(self)(self.message, field=self.field, rolled_back=True)


class NotFoundError(MenuHostError):
    """Plan, tenant or subscription does not exist"""
    pass


class ConflictError(MenuHostError):
    """Uniqueness violation or an operation blocked by existing rows"""
    pass


class ForbiddenError(MenuHostError):
    """Role or subscription gating denial"""
    pass


class ValidationFailedError(MenuHostError):
    """Malformed input"""
    pass


class InternalFailureError(MenuHostError):
    """Unexpected storage failure; the message is safe to show to callers"""
    pass
