"""Tests for neighborwatch/core/firebase.py - Firebase Admin SDK bootstrap."""

from unittest.mock import patch

from neighborwatch.core.firebase import init_firebase


def test_init_firebase_already_initialized():
    """A second startup in the same process must not re-initialize the SDK."""
    with (
        patch("neighborwatch.core.firebase.get_app") as mock_get_app,
        patch("neighborwatch.core.firebase.initialize_app") as mock_init,
    ):
        mock_get_app.return_value = "mock_app"

        init_firebase()

        mock_get_app.assert_called_once()
        mock_init.assert_not_called()


def test_init_firebase_not_initialized():
    with (
        patch("neighborwatch.core.firebase.get_app") as mock_get_app,
        patch("neighborwatch.core.firebase.initialize_app") as mock_init,
    ):
        # get_app() raises ValueError when no default app exists
        mock_get_app.side_effect = ValueError("Firebase app not initialized")

        init_firebase()

        mock_init.assert_called_once_with()
