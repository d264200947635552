"""Tests for neighborwatch/auth/dependencies.py - credential and user resolution."""

from unittest.mock import MagicMock

import pytest

from neighborwatch.auth.dependencies import get_current_user, get_token_claims
from neighborwatch.auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    SessionCookieError,
)
from neighborwatch.auth.service import FirebaseAuthService, TokenClaims
from neighborwatch.core.exceptions import AppException
from neighborwatch.user.exceptions import UserInactiveError, UserNotFoundError


def create_mock_firebase_service():
    """Create a mock FirebaseAuthService."""
    return MagicMock(spec=FirebaseAuthService)


def create_mock_request(cookies=None):
    request = MagicMock()
    request.cookies = cookies or {}
    return request


def create_bearer(token: str):
    credentials = MagicMock()
    credentials.credentials = token
    return credentials


def test_get_token_claims_valid_bearer_token():
    """A valid bearer ID token yields its claims."""
    mock_service = create_mock_firebase_service()
    mock_service.verify_id_token.return_value = TokenClaims(uid="uid-1")

    claims = get_token_claims(
        create_mock_request(), mock_service, create_bearer("valid-token")
    )

    assert claims.uid == "uid-1"
    mock_service.verify_id_token.assert_called_once_with("valid-token")


def test_get_token_claims_invalid_bearer_token():
    """A rejected bearer token raises InvalidTokenError (401)."""
    mock_service = create_mock_firebase_service()
    mock_service.verify_id_token.side_effect = AppException("Invalid token")

    with pytest.raises(InvalidTokenError) as exc_info:
        get_token_claims(create_mock_request(), mock_service, create_bearer("bad"))

    assert exc_info.value.status_code == 401


def test_get_token_claims_session_cookie_valid():
    """A valid session cookie is verified with revocation checks."""
    mock_service = create_mock_firebase_service()
    mock_service.verify_session_cookie.return_value = TokenClaims(uid="uid-2")

    claims = get_token_claims(
        create_mock_request({"session": "valid-session-cookie"}), mock_service, None
    )

    assert claims.uid == "uid-2"
    mock_service.verify_session_cookie.assert_called_once_with(
        "valid-session-cookie", check_revoked=True
    )


def test_get_token_claims_session_cookie_invalid():
    """A rejected session cookie raises InvalidTokenError."""
    mock_service = create_mock_firebase_service()
    mock_service.verify_session_cookie.side_effect = SessionCookieError("bad cookie")

    with pytest.raises(InvalidTokenError) as exc_info:
        get_token_claims(create_mock_request({"session": "x"}), mock_service, None)

    assert exc_info.value.status_code == 401


def test_get_token_claims_not_authenticated():
    """No cookie and no bearer raises InvalidCredentialsError."""
    mock_service = create_mock_firebase_service()

    with pytest.raises(InvalidCredentialsError) as exc_info:
        get_token_claims(create_mock_request(), mock_service, None)

    assert exc_info.value.status_code == 401
    assert "Not authenticated" in exc_info.value.message


def test_get_token_claims_session_cookie_priority_over_bearer():
    """The session cookie wins when both credentials are presented."""
    mock_service = create_mock_firebase_service()
    mock_service.verify_session_cookie.return_value = TokenClaims(uid="cookie-uid")

    claims = get_token_claims(
        create_mock_request({"session": "session-cookie"}),
        mock_service,
        create_bearer("bearer-token"),
    )

    assert claims.uid == "cookie-uid"
    mock_service.verify_id_token.assert_not_called()


def test_get_current_user_returns_user(session, test_user):
    result = get_current_user(TokenClaims(uid=test_user.external_id), session)

    assert result.id == test_user.id
    assert result.email == test_user.email


def test_get_current_user_not_found(session):
    """Verified credential without a local profile raises UserNotFoundError."""
    with pytest.raises(UserNotFoundError) as exc_info:
        get_current_user(TokenClaims(uid="non-existent-uid"), session)

    assert exc_info.value.status_code == 404


def test_get_current_user_inactive(session, inactive_user):
    """Deactivated accounts are refused with 403."""
    with pytest.raises(UserInactiveError) as exc_info:
        get_current_user(TokenClaims(uid=inactive_user.external_id), session)

    assert exc_info.value.status_code == 403


def test_protected_route_without_credentials(unauthenticated_client):
    response = unauthenticated_client.get("/areas/mine")

    assert response.status_code == 401
    assert response.json()["type"] == "invalid_credentials"


def test_protected_route_with_bearer_token(
    unauthenticated_client, mock_firebase_auth, test_user
):
    mock_firebase_auth.verify_id_token.return_value = TokenClaims(
        uid=test_user.external_id
    )

    response = unauthenticated_client.get(
        "/users/me", headers={"Authorization": "Bearer some-id-token"}
    )

    assert response.status_code == 200
    assert response.json()["email"] == test_user.email
