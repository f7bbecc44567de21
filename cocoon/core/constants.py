"""
App-wide constants for route configuration.

Single source of truth for route prefixes, tags, common OpenAPI response
definitions and the email template environments.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from cocoon.core.responses import ErrorEnvelope


@dataclass(frozen=True)
class RouteConfig:
    """Configuration for a route group."""

    prefix: str
    tag: str


class Routes:
    """Route configurations for all API endpoints."""

    AUTH = RouteConfig(prefix="/auth", tag="auth")
    ORDERS = RouteConfig(prefix="/orders", tag="orders")
    PRODUCTS = RouteConfig(prefix="/products", tag="products")
    SUBSCRIPTIONS = RouteConfig(prefix="/subscriptions", tag="subscriptions")
    HEALTH = RouteConfig(prefix="/health", tag="health")


def _error(description: str) -> dict[str, Any]:
    return {"description": description, "model": ErrorEnvelope}


class CommonResponses:
    """Standard HTTP error response definitions for OpenAPI documentation."""

    BAD_REQUEST: dict[int, dict[str, Any]] = {400: _error("Invalid request data")}
    UNAUTHORIZED: dict[int, dict[str, Any]] = {
        401: _error("Not authenticated or invalid credentials")
    }
    NOT_FOUND: dict[int, dict[str, Any]] = {404: _error("Resource not found")}
    CONFLICT: dict[int, dict[str, Any]] = {409: _error("Resource already exists")}


# HTML Templates Directory
EmailTemplatesDir = Path(__file__).parent.parent / "templates" / "emails"
CompiledEmailTemplatesDir = EmailTemplatesDir / "compiled"

# Jinja2 environment for source templates (used by compile script)
JinjaEmailTemplatesEnv = Environment(
    loader=FileSystemLoader(str(EmailTemplatesDir)),
    autoescape=select_autoescape(["html", "xml"]),
)

# Jinja2 environment for compiled templates (used at runtime)
JinjaCompiledEmailTemplatesEnv = Environment(
    loader=FileSystemLoader(str(CompiledEmailTemplatesDir)),
    autoescape=select_autoescape(["html", "xml"]),
)
