"""Outbound email via Resend.

Templates are pre-compiled (CSS inlined, HTML minified) by
scripts/compile_emails.py and rendered with Jinja2 at send time.
"""

import logging
from functools import lru_cache

import resend

from cocoon.core.constants import JinjaCompiledEmailTemplatesEnv
from cocoon.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)


def _render_template(template_name: str, **context: str) -> str:
    """Render a pre-compiled email template.

    Run `make compile-emails` after modifying source templates.
    """
    template = JinjaCompiledEmailTemplatesEnv.get_template(template_name)
    return template.render(**context)


def init_resend(settings: Settings) -> None:
    """Initialize Resend with API key if available."""
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY is not set; outgoing email will fail")
        return
    resend.api_key = settings.resend_api_key


class EmailService:
    """Sends transactional email. Callers treat delivery as fire-and-forget."""

    def __init__(self, settings: Settings):
        self._settings = settings

    @property
    def from_email(self) -> str:
        return f"Cocoon <noreply@{self._settings.app_domain}>"

    def _send(self, to_email: str, subject: str, html: str) -> None:
        resend.Emails.send(
            {
                "from": self.from_email,
                "to": to_email,
                "subject": subject,
                "html": html,
            }
        )

    def send_verification_email(self, to_email: str, verification_url: str) -> None:
        """Send the account verification link.

        Args:
            to_email: Recipient email address
            verification_url: Link to GET /auth/verify-email with the token
        """
        html_content = _render_template(
            "email-verification.html",
            verification_url=verification_url,
            expires_minutes=str(self._settings.verification_token_minutes),
        )
        self._send(to_email, "Cocoon - Verify Your Email", html_content)

    def send_subscription_confirmation(self, to_email: str) -> None:
        """Thank a newsletter subscriber."""
        html_content = _render_template(
            "subscription-confirmation.html",
            shop_url=self._settings.client_url,
        )
        self._send(to_email, "Cocoon - Thanks for subscribing", html_content)


@lru_cache
def get_email_service() -> EmailService:
    return EmailService(get_settings())
