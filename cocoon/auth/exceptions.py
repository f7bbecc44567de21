"""Auth domain exceptions.

Token failures are split by cause: an expired token means "refresh and
retry", a malformed one means the request itself is bad, and a revoked one
means "authenticate again".
"""

from cocoon.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ValidationError,
)


class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password combination is invalid."""

    error_type = "invalid_credentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class EmailNotVerifiedError(AuthenticationError):
    """Raised when a pending_verification account tries to log in."""

    error_type = "email_not_verified"

    def __init__(self, message: str = "Please verify your email before logging in"):
        super().__init__(message)


class NotAuthenticatedError(AuthenticationError):
    """Raised when a protected route is called without a bearer token."""

    error_type = "not_authenticated"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class AccessTokenExpiredError(AuthenticationError):
    error_type = "token_expired"

    def __init__(self, message: str = "Access token has expired"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer or refresh token cannot be decoded."""

    error_type = "invalid_token"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class RefreshTokenExpiredError(AuthenticationError):
    error_type = "token_expired"

    def __init__(self, message: str = "Refresh token has expired"):
        super().__init__(message)


class TokenRevokedError(AuthenticationError):
    """Raised when a well-formed refresh token is no longer the stored one."""

    error_type = "token_revoked"

    def __init__(self, message: str = "Invalid refresh token"):
        super().__init__(message)


class AdminRequiredError(AuthorizationError):
    """Raised when admin privileges are required."""

    error_type = "admin_required"

    def __init__(self, message: str = "Admin privileges required"):
        super().__init__(message)


# Email verification (400)
class EmailVerificationError(ValidationError):
    """Base class for email verification failures."""

    error_type = "email_verification_error"

    def __init__(self, message: str = "Email verification failed"):
        super().__init__(message)


class VerificationTokenExpiredError(EmailVerificationError):
    error_type = "verification_token_expired"

    def __init__(self, message: str = "Verification link has expired"):
        super().__init__(message)


class InvalidVerificationTokenError(EmailVerificationError):
    error_type = "invalid_verification_token"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class AlreadyVerifiedError(EmailVerificationError):
    error_type = "already_verified"

    def __init__(self, message: str = "Account has already been verified"):
        super().__init__(message)


class UnsupportedProviderError(BadRequestError):
    error_type = "unsupported_provider"

    def __init__(self, message: str = "Unsupported OAuth provider"):
        super().__init__(message)
