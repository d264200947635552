"""
Model package.

IMPORTANT (Alembic / SQLModel):
- Alembic autogenerate relies on `SQLModel.metadata`, which is populated only
  when the table models are imported.
- `alembic/env.py` imports `neighborwatch.models`, so this module must import
  every SQLModel `table=True` model to register it.
"""

# Import table models so SQLModel registers them in metadata.
from neighborwatch.area.models import (  # noqa: F401
    AreaInvitation,
    AreaMembership,
    AreaOfInterest,
)
from neighborwatch.chat.models import FoundObjectChat, FoundObjectMessage  # noqa: F401
from neighborwatch.device.models import (  # noqa: F401
    Device,
    PhoneDevice,
    PhonePosition,
    Position,
)
from neighborwatch.event.models import Event  # noqa: F401
from neighborwatch.group.models import Group, GroupMembership  # noqa: F401
from neighborwatch.user.models import User  # noqa: F401
