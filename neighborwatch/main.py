from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqladmin import Admin

from neighborwatch.admin.auth import AdminAuth
from neighborwatch.admin.views import (
    AreaAdmin,
    DeviceAdmin,
    EventAdmin,
    FoundObjectChatAdmin,
    GroupAdmin,
    UserAdmin,
)
from neighborwatch.core.cors import add_cors_middleware
from neighborwatch.core.email import init_resend
from neighborwatch.core.exception_handlers import register_exception_handlers
from neighborwatch.core.firebase import init_firebase
from neighborwatch.core.http import close_push_client
from neighborwatch.core.logging import configure_logging
from neighborwatch.core.request_logging import add_request_logging_middleware
from neighborwatch.db.engine import engine
from neighborwatch.router import api_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_firebase()
    init_resend()
    yield
    await close_push_client()


app = FastAPI(title="NeighborWatch", version="0.1.0", lifespan=lifespan)

app.include_router(api_router)

add_request_logging_middleware(app)
add_cors_middleware(app)
register_exception_handlers(app)

# Mount SQLAdmin UI at /admin (SQLAdmin enables sessions via auth backend secret)
admin = Admin(
    app=app,
    engine=engine,
    authentication_backend=AdminAuth(),
)
for view in (UserAdmin, AreaAdmin, EventAdmin, GroupAdmin, DeviceAdmin, FoundObjectChatAdmin):
    admin.add_view(view)
