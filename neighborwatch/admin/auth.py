import secrets

from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request

from neighborwatch.core.settings import get_settings

ADMIN_SESSION_KEY = "neighborwatch_admin"


class AdminAuth(AuthenticationBackend):
    """Operator login for the back-office panel, kept in a signed session."""

    def __init__(self) -> None:
        settings = get_settings()
        super().__init__(secret_key=settings.session_secret_key)

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = str(form.get("username", "")).strip()
        password = str(form.get("password", ""))

        settings = get_settings()
        ok = secrets.compare_digest(
            username.encode(), settings.admin_username.encode()
        ) & secrets.compare_digest(password.encode(), settings.admin_password.encode())
        if ok:
            request.session[ADMIN_SESSION_KEY] = username
        return ok

    async def logout(self, request: Request) -> bool:
        request.session.pop(ADMIN_SESSION_KEY, None)
        return True

    async def authenticate(self, request: Request) -> bool:
        return bool(request.session.get(ADMIN_SESSION_KEY))
