# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header

from leave_ledger.exceptions import ForbiddenError
from leave_ledger.models.enums import ClientOrigin
from leave_ledger.schemas.auth import AuthContext


async def get_auth_context(
    x_user_id: str = Header(min_length=1),
    x_user_name: str | None = Header(default=None),
    x_role: str = Header(default="employee"),
    x_client_origin: str | None = Header(default=None),
) -> AuthContext:
    """Extract dev caller context from request headers."""
    return AuthContext(
        user_id=x_user_id,
        user_name=x_user_name,
        role=x_role,
        origin=ClientOrigin.from_header(x_client_origin),
    )


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if not auth.is_admin:
        raise ForbiddenError("Admin access required")
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]
