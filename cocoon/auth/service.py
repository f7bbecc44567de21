"""Authentication service.

Account lifecycle: unregistered -> pending_verification -> verified.
Registration creates a pending account and mails a short-lived
verification link; login needs a verified local account; login and
refresh both rotate the single stored refresh token.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

from cocoon.auth.exceptions import (
    AlreadyVerifiedError,
    EmailNotVerifiedError,
    InvalidCredentialsError,
    TokenRevokedError,
)
from cocoon.auth.oauth import OAuthProfile
from cocoon.auth.tokens import TokenPair, TokenService
from cocoon.core.email import EmailService
from cocoon.core.exceptions import ConflictError
from cocoon.core.security import hash_password, verify_password
from cocoon.core.settings import Settings
from cocoon.user.exceptions import EmailExistsError, UserNotFoundError
from cocoon.user.models import FederatedAccount, User
from cocoon.user.repository import UserRepository, normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: TokenPair


class AuthService:
    def __init__(
        self,
        settings: Settings,
        users: UserRepository,
        tokens: TokenService,
        email: EmailService,
    ):
        self._settings = settings
        self._users = users
        self._tokens = tokens
        self._email = email

    def verification_url(self, token: str) -> str:
        query = urlencode({"token": token})
        return f"{self._settings.base_url.rstrip('/')}/auth/verify-email?{query}"

    def _send_verification(self, user: User) -> None:
        token = self._tokens.create_verification_token(user.id)
        try:
            self._email.send_verification_email(
                user.email, self.verification_url(token)
            )
        except Exception:
            # Delivery is best-effort; the user can ask for a new link.
            logger.warning(
                "Verification email failed for user %s",
                user.id,
                extra={"user_id": str(user.id)},
                exc_info=True,
            )

    def _issue_tokens(self, user: User) -> TokenPair:
        pair = self._tokens.create_token_pair(user)
        self._users.set_refresh_token(user.id, pair.refresh_token)
        return pair

    def register(self, email: str, password: str, name: str) -> User:
        """Create a pending_verification account and mail the verification link.

        Raises:
            EmailExistsError: If the email is already registered
        """
        if self._users.email_exists(email):
            raise EmailExistsError()

        user = self._users.insert(
            User(
                email=normalize_email(email),
                name=name,
                password_hash=hash_password(password),
            )
        )
        logger.info("User registered", extra={"user_id": str(user.id)})
        self._send_verification(user)
        return user

    def verify_email(self, token: str) -> User:
        """Consume a verification token.

        Raises:
            VerificationTokenExpiredError: If the link has expired
            InvalidVerificationTokenError: If the token is malformed
            UserNotFoundError: If the account no longer exists
            AlreadyVerifiedError: If the account is already verified
        """
        user_id = self._tokens.decode_verification_token(token)
        user = self._users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError()
        if user.email_verified:
            raise AlreadyVerifiedError()

        self._users.mark_email_verified(user.id)
        return user.model_copy(update={"email_verified": True})

    def resend_verification(self, email: str) -> None:
        """Mail a fresh verification link to a pending local account.

        Silent for unknown, federated or already verified accounts so the
        endpoint does not reveal which emails are registered.
        """
        user = self._users.get_by_email(email)
        if user is None or user.email_verified or user.is_federated:
            return
        self._send_verification(user)

    def check_email(self, email: str) -> bool:
        return self._users.email_exists(email)

    def login(self, email: str, password: str) -> LoginResult:
        """Authenticate a local account.

        Raises:
            InvalidCredentialsError: Unknown email, federated account or wrong password
            EmailNotVerifiedError: Correct password but email not verified
        """
        user = self._users.get_by_email(email)
        if user is None or user.is_federated:
            raise InvalidCredentialsError()
        if not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()
        if not user.email_verified:
            raise EmailNotVerifiedError()

        return LoginResult(user=user, tokens=self._issue_tokens(user))

    def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate tokens for a presented refresh token.

        Raises:
            RefreshTokenExpiredError: If the token has expired
            InvalidTokenError: If the token is malformed
            TokenRevokedError: If the token is not the one currently stored
        """
        user_id = self._tokens.decode_refresh_token(refresh_token)
        user = self._users.get_by_id(user_id)
        if user is None or user.refresh_token != refresh_token:
            raise TokenRevokedError()

        pair = self._tokens.create_token_pair(user)
        # Compare-and-swap: of two concurrent refreshes only one can win.
        rotated = self._users.rotate_refresh_token(
            user.id, refresh_token, pair.refresh_token
        )
        if rotated is None:
            raise TokenRevokedError()
        return pair

    def logout(self, user: User) -> None:
        self._users.set_refresh_token(user.id, None)

    def oauth_login(self, profile: OAuthProfile) -> LoginResult:
        """Find or create the account a provider vouched for, then issue tokens.

        Raises:
            ConflictError: If the email belongs to another account and the
                provider did not confirm the address
        """
        user = self._users.get_by_federated_subject(profile.provider, profile.subject)
        if user is None:
            user = self._users.get_by_email(profile.email)
            if user is not None and not profile.email_verified:
                raise ConflictError("Email is registered with another sign-in method")
        if user is None:
            user = self._users.insert(
                User(
                    email=normalize_email(profile.email),
                    name=profile.name,
                    account=FederatedAccount(
                        provider=profile.provider, subject=profile.subject
                    ),
                    email_verified=True,
                )
            )
            logger.info(
                "Federated user created via %s",
                profile.provider.value,
                extra={"user_id": str(user.id)},
            )
        elif not user.email_verified:
            self._users.mark_email_verified(user.id)

        return LoginResult(user=user, tokens=self._issue_tokens(user))
