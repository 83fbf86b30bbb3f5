from __future__ import annotations

from pydantic import BaseModel

from leave_ledger.models.enums import ClientOrigin


class AuthContext(BaseModel):
    """Dev caller context extracted from request headers."""

    user_id: str
    user_name: str | None = None
    role: str = "employee"
    origin: ClientOrigin = ClientOrigin.WEB

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
