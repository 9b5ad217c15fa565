from __future__ import annotations

from scam_reports.schemas.common import CamelModel
from scam_reports.services.authorization import Role


class RoleResponse(CamelModel):
    role: Role
    user_id: str | None = None
    company_id: str | None = None
    is_authorized: bool
