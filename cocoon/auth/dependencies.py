"""Auth domain dependencies.

Bearer-token authentication and service wiring for FastAPI routes.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cocoon.auth.exceptions import AdminRequiredError, NotAuthenticatedError
from cocoon.auth.oauth import OAuthClient, get_oauth_service
from cocoon.auth.service import AuthService
from cocoon.auth.tokens import TokenService, get_token_service
from cocoon.core.deps import DatabaseDep, EmailServiceDep, SettingsDep
from cocoon.user.exceptions import UserNotFoundError
from cocoon.user.models import User
from cocoon.user.repository import UserRepository

security = HTTPBearer(auto_error=False)

TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]
OAuthClientDep = Annotated[OAuthClient, Depends(get_oauth_service)]


def get_user_repository(db: DatabaseDep) -> UserRepository:
    return UserRepository(db)


UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]


def get_auth_service(
    settings: SettingsDep,
    users: UserRepositoryDep,
    tokens: TokenServiceDep,
    email: EmailServiceDep,
) -> AuthService:
    return AuthService(settings=settings, users=users, tokens=tokens, email=email)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_current_user(
    users: UserRepositoryDep,
    tokens: TokenServiceDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(security)
    ] = None,
) -> User:
    """Resolve the bearer access token to the stored User.

    Raises:
        NotAuthenticatedError: If no bearer token was sent
        AccessTokenExpiredError: If the token has expired
        InvalidTokenError: If the token is malformed
        UserNotFoundError: If the account no longer exists
    """
    if credentials is None:
        raise NotAuthenticatedError()

    claims = tokens.decode_access_token(credentials.credentials)
    user = users.get_by_id(claims.user_id)
    if user is None:
        raise UserNotFoundError()
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def get_admin_user(user: CurrentUserDep) -> User:
    if not user.is_admin:
        raise AdminRequiredError()
    return user

