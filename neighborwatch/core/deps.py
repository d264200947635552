"""Centralized dependency type aliases for FastAPI routes.

Import shared dependencies from this single module:
    from neighborwatch.core.deps import SessionDep, SettingsDep, PushServiceDep
"""

from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from neighborwatch.core.settings import Settings, get_settings
from neighborwatch.db.engine import get_session
from neighborwatch.notifications.push import PushService, get_push_service

# Database session
SessionDep = Annotated[Session, Depends(get_session)]

# Application settings
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Push notification dispatcher
PushServiceDep = Annotated[PushService, Depends(get_push_service)]
