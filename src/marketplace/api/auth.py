"""Principal extraction for the HTTP surface.

Authentication happens upstream; the gateway forwards the caller as
``X-Principal-Id``, ``X-Principal-Role`` and, optionally,
``X-Principal-Name`` headers.
"""

from dataclasses import dataclass

from fastapi import Depends, Header

from marketplace.errors import NotAuthenticatedError, NotAuthorizedError
from marketplace.utils.logging import bind_request_context

ROLES = ("customer", "seller", "admin")


@dataclass(frozen=True)
class Principal:
    principal_id: str
    role: str
    name: str | None = None


def current_principal(
    x_principal_id: str | None = Header(default=None),
    x_principal_role: str | None = Header(default=None),
    x_principal_name: str | None = Header(default=None),
) -> Principal:
    if not x_principal_id or not x_principal_role:
        raise NotAuthenticatedError("Not authorized, no principal supplied")
    if x_principal_role not in ROLES:
        raise NotAuthorizedError(f"Unknown role '{x_principal_role}'")

    bind_request_context(principal_id=x_principal_id, role=x_principal_role)
    return Principal(principal_id=x_principal_id, role=x_principal_role, name=x_principal_name)


def require_role(*roles: str):
    """Dependency that admits only principals holding one of ``roles``."""

    def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if principal.role not in roles:
            raise NotAuthorizedError(f"User role '{principal.role}' is not authorized to access this route")
        return principal

    return dependency
