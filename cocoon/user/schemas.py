"""User domain schemas.

Only fields safe for API responses; the password hash and the stored
refresh token of other sessions are never exposed through these.
"""

from pydantic import BaseModel, ConfigDict

from cocoon.user.models import User, UserRole


class UserRead(BaseModel):
    """Public user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "UserRead":
        return cls(id=str(user.id), name=user.name, email=user.email, role=user.role)
