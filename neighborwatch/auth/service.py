"""Firebase token verification.

Sign-up, sign-in and session issuance happen in the mobile client against
Firebase directly; the API only verifies what the client presents and maps
it to an external uid.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from firebase_admin import auth as firebase_admin_auth
from firebase_admin.exceptions import FirebaseError

from neighborwatch.auth.exceptions import InvalidTokenError, SessionCookieError


@dataclass(frozen=True)
class TokenClaims:
    """Decoded token claims from Firebase."""

    uid: str
    email: str | None = None


class TokenVerifier(Protocol):
    """What the request dependencies need from an auth provider."""

    def verify_session_cookie(
        self, session_cookie: str, check_revoked: bool = True
    ) -> TokenClaims:
        """Verify session cookie and return claims."""
        ...

    def verify_id_token(self, id_token: str) -> TokenClaims:
        """Verify ID token and return claims."""
        ...


class FirebaseAuthService:
    """Verifies Firebase ID tokens and session cookies."""

    @staticmethod
    def _extract_token_claims(
        decoded: dict[str, Any], allow_sub: bool = False
    ) -> TokenClaims:
        """Extract uid and email from decoded token claims.

        Raises:
            InvalidTokenError: If uid is missing
        """
        uid = decoded.get("uid")
        if allow_sub and not uid:
            uid = decoded.get("sub")

        if not uid:
            raise InvalidTokenError("Invalid token: missing uid")

        return TokenClaims(uid=uid, email=decoded.get("email"))

    def verify_session_cookie(
        self, session_cookie: str, check_revoked: bool = True
    ) -> TokenClaims:
        """Verify session cookie and return claims.

        Raises:
            SessionCookieError: If verification fails
        """
        try:
            decoded = firebase_admin_auth.verify_session_cookie(
                session_cookie, check_revoked=check_revoked
            )
        except (ValueError, FirebaseError) as e:
            raise SessionCookieError("Invalid session cookie") from e
        try:
            return self._extract_token_claims(decoded, allow_sub=True)
        except InvalidTokenError as e:
            raise SessionCookieError(e.message) from e

    def verify_id_token(self, id_token: str) -> TokenClaims:
        """Verify ID token and return claims.

        Raises:
            InvalidTokenError: If verification fails
        """
        try:
            decoded = firebase_admin_auth.verify_id_token(id_token)
        except (ValueError, FirebaseError) as e:
            raise InvalidTokenError() from e
        return self._extract_token_claims(decoded, allow_sub=False)


@lru_cache
def get_firebase_auth_service() -> FirebaseAuthService:
    """Get cached Firebase Auth Service instance."""
    return FirebaseAuthService()
