"""
App-wide constants for route configuration and templates.

This module provides a single source of truth for route prefixes, tags,
common response definitions and the Jinja2 template environments.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for all API endpoints."""

    USER = RouteConfig(prefix="/users", tag="users")
    AREA = RouteConfig(prefix="/areas", tag="areas")
    EVENT = RouteConfig(prefix="/events", tag="events")
    PUBLIC_EVENT = RouteConfig(prefix="/events/public", tag="events")
    GROUP = RouteConfig(prefix="/groups", tag="groups")
    DEVICE = RouteConfig(prefix="/devices", tag="devices")
    PHONE_DEVICE = RouteConfig(prefix="/phone-device", tag="devices")
    FOUND_CHAT = RouteConfig(prefix="/found-chats", tag="found-chats")
    FINDER = RouteConfig(prefix="", tag="found-chats")
    PUBLIC = RouteConfig(prefix="", tag="public")
    HEALTH = RouteConfig(prefix="/health", tag="health")


# Common response definitions for reuse across routers
class CommonResponses:
    """Standard HTTP error response definitions for OpenAPI documentation."""

    UNAUTHORIZED: dict[int, dict[str, Any]] = {
        401: {"description": "Not authenticated or invalid credentials"}
    }
    FORBIDDEN: dict[int, dict[str, Any]] = {
        403: {"description": "Caller lacks the required role, ownership or session"}
    }
    NOT_FOUND: dict[int, dict[str, Any]] = {404: {"description": "Resource not found"}}
    CONFLICT: dict[int, dict[str, Any]] = {
        409: {"description": "Duplicate resource or illegal state transition"}
    }
    BAD_REQUEST: dict[int, dict[str, Any]] = {
        400: {"description": "Invalid request data"}
    }


TemplatesDir = Path(__file__).parent.parent / "templates"
EmailTemplatesDir = TemplatesDir / "emails"

# Jinja2 environment for public HTML pages
JinjaPagesEnv = Environment(
    loader=FileSystemLoader(str(TemplatesDir / "pages")),
    autoescape=select_autoescape(["html", "xml"]),
)

# Jinja2 environment for email bodies
JinjaEmailTemplatesEnv = Environment(
    loader=FileSystemLoader(str(EmailTemplatesDir)),
    autoescape=select_autoescape(["html", "xml"]),
)
