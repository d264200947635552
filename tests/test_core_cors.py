"""Tests for neighborwatch/core/cors.py - CORS middleware configuration."""

from unittest.mock import MagicMock, patch

from neighborwatch.core.cors import add_cors_middleware
from neighborwatch.core.settings import Settings


def _settings(cors_origins: str) -> Settings:
    return Settings(
        database_url="sqlite://",
        session_secret_key="secret",
        admin_username="admin",
        admin_password="admin",
        cors_origins=cors_origins,
    )


def test_explicit_origins_allow_credentials():
    mock_app = MagicMock()

    with patch("neighborwatch.core.cors.get_settings") as mock_get_settings:
        mock_get_settings.return_value = _settings(
            "https://a.example.com, https://b.example.com"
        )
        add_cors_middleware(mock_app)

    call_kwargs = mock_app.add_middleware.call_args[1]
    assert call_kwargs["allow_origins"] == [
        "https://a.example.com",
        "https://b.example.com",
    ]
    assert call_kwargs["allow_credentials"] is True
    assert call_kwargs["allow_methods"] == ["*"]


def test_wildcard_origin_disables_credentials():
    mock_app = MagicMock()

    with patch("neighborwatch.core.cors.get_settings") as mock_get_settings:
        mock_get_settings.return_value = _settings("*")
        add_cors_middleware(mock_app)

    call_kwargs = mock_app.add_middleware.call_args[1]
    assert call_kwargs["allow_origins"] == ["*"]
    assert call_kwargs["allow_credentials"] is False


def test_cors_origins_list_skips_blanks():
    settings = _settings(" https://a.example.com ,, ")

    assert settings.cors_origins_list == ["https://a.example.com"]
