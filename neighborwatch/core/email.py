import logging

import resend

from neighborwatch.core.constants import JinjaEmailTemplatesEnv
from neighborwatch.core.settings import get_settings

logger = logging.getLogger(__name__)


def _render_template(template_name: str, **context: str) -> str:
    """Render an email template from the templates/emails directory."""
    template = JinjaEmailTemplatesEnv.get_template(template_name)
    return template.render(**context)


def init_resend() -> None:
    """Initialize Resend with API key if available."""
    settings = get_settings()
    if not settings.resend_api_key:
        return
    resend.api_key = settings.resend_api_key


def send_area_invitation_email(to_email: str, area_name: str, sender_name: str) -> None:
    """Invite someone without an account to an area of interest.

    Runs as a background task; delivery failures are logged and dropped.
    """
    settings = get_settings()
    if not settings.resend_api_key:
        logger.info("Resend not configured, skipping invitation email")
        return

    html_content = _render_template(
        "area-invitation.html",
        area_name=area_name,
        sender_name=sender_name,
        app_url=f"{settings.client_url}/areas/invitations",
    )

    try:
        resend.Emails.send(
            {
                "from": f"noreply@{settings.app_domain}",
                "to": to_email,
                "subject": f"NeighborWatch - Invitation to {area_name}",
                "html": html_content,
            }
        )
    except Exception:
        logger.exception("Failed to send area invitation email")
