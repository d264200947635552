"""Tests for neighborwatch/db/engine.py - database engine and sessions."""

import contextlib

from sqlmodel import Session

from neighborwatch.db.engine import get_session


def test_get_session_yields_session():
    gen = get_session()
    session = next(gen)

    assert isinstance(session, Session)

    with contextlib.suppress(StopIteration):
        next(gen)
