"""User domain models.

Stored in the ``users`` collection. Field aliases are the stored field
names.
"""

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, EmailStr, Field

from cocoon.core.mixins import TimestampMixin
from cocoon.db.document import Document


class UserRole(str, Enum):
    user = "user"
    admin = "admin"


class AccountStatus(str, Enum):
    """Verification state of an account.

    - pending_verification: registered, email not confirmed yet
    - verified: email confirmed (federated accounts start here)
    """

    pending_verification = "pending_verification"
    verified = "verified"


class OAuthProvider(str, Enum):
    google = "google"
    facebook = "facebook"


class LocalAccount(BaseModel):
    """Account authenticated with a local password."""

    kind: Literal["local"] = "local"


class FederatedAccount(BaseModel):
    """Account whose identity is proven by an OAuth provider.

    Has no local password; local login always fails for it.
    """

    kind: Literal["federated"] = "federated"
    provider: OAuthProvider
    subject: str


AccountKind = Annotated[LocalAccount | FederatedAccount, Field(discriminator="kind")]


class User(TimestampMixin, Document):
    """User document.

    Only one refresh token is valid at a time: every login or refresh
    overwrites ``refresh_token``.
    """

    email: EmailStr = Field(alias="user_email")
    name: str = Field(default="", alias="user_name", max_length=100)
    password_hash: str | None = Field(default=None, alias="user_password")
    account: AccountKind = Field(default_factory=LocalAccount, alias="account_kind")
    role: UserRole = Field(default=UserRole.user, alias="user_role")
    email_verified: bool = Field(default=False, alias="is_email_verified")
    refresh_token: str | None = None

    @property
    def is_federated(self) -> bool:
        return isinstance(self.account, FederatedAccount)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def status(self) -> AccountStatus:
        if self.email_verified:
            return AccountStatus.verified
        return AccountStatus.pending_verification
