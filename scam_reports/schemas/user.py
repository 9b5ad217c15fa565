from __future__ import annotations

from pydantic import Field

from scam_reports.schemas.common import CamelModel


class UserProfile(CamelModel):
    id: str
    username: str
    name: str | None = None
    bio: str | None = None
    profile_picture: str | None = None
    created_at: str | None = None
    email: str | None = None
    # Present only when the user was found on the company's member roster
    joined_at: str | None = None
    total_spent: float | None = None
    member_status: str | None = Field(default=None, description="Membership status")
    access_level: str | None = None
