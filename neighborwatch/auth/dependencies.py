"""Auth domain dependencies.

Authentication dependencies for FastAPI routes including get_current_user
and type aliases for authenticated user injection.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session, select

from neighborwatch.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    SessionCookieError,
)
from neighborwatch.auth.service import (
    FirebaseAuthService,
    TokenClaims,
    get_firebase_auth_service,
)
from neighborwatch.core.exceptions import AppException
from neighborwatch.db.engine import get_session
from neighborwatch.user.exceptions import UserInactiveError, UserNotFoundError
from neighborwatch.user.models import User, UserStatus

security = HTTPBearer(auto_error=False)


def get_token_claims(
    request: Request,
    firebase_auth: Annotated[FirebaseAuthService, Depends(get_firebase_auth_service)],
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(security)
    ] = None,
) -> TokenClaims:
    """Verify the caller's Firebase credential and return its claims.

    Supports two authentication methods (in priority order):
    1. Session cookie (web pages)
    2. Bearer ID token (mobile app)

    Raises:
        InvalidTokenError: If authentication token is invalid
        InvalidCredentialsError: If not authenticated
    """
    session_cookie = request.cookies.get("session")

    if session_cookie:
        try:
            return firebase_auth.verify_session_cookie(
                session_cookie, check_revoked=True
            )
        except SessionCookieError as e:
            raise InvalidTokenError() from e

    if credentials is not None:
        try:
            return firebase_auth.verify_id_token(credentials.credentials)
        except AppException as e:
            raise InvalidTokenError() from e

    raise InvalidCredentialsError()


TokenClaimsDep = Annotated[TokenClaims, Depends(get_token_claims)]


def get_current_user(
    claims: TokenClaimsDep,
    session: Annotated[Session, Depends(get_session)],
) -> User:
    """Return the local User behind a verified credential.

    Raises:
        UserNotFoundError: If the uid has no registered profile
        UserInactiveError: If the account was deactivated
    """
    user = session.exec(select(User).where(User.external_id == claims.uid)).first()

    if user is None:
        raise UserNotFoundError()

    if user.status == UserStatus.inactive:
        raise UserInactiveError()

    return user


# Type aliases for dependency injection
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_auth(_user: CurrentUserDep) -> None:
    """Require authentication without injecting user into path operation.

    Use as a router-level dependency when all routes require auth:
        router = APIRouter(dependencies=[Depends(require_auth)])

    For endpoints that need the user object, still use CurrentUserDep directly.
    FastAPI caches dependencies, so there's no duplicate auth overhead.
    """
    pass  # Authentication already validated by CurrentUserDep
