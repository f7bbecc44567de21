"""Tests for cocoon/core/email.py - transactional email."""

from unittest.mock import patch

from cocoon.core.email import EmailService, init_resend


def test_init_resend_sets_api_key(settings):
    with patch("cocoon.core.email.resend") as mock_resend:
        init_resend(settings.model_copy(update={"resend_api_key": "re_test"}))

    assert mock_resend.api_key == "re_test"


def test_init_resend_without_key_leaves_client_untouched(settings):
    with patch("cocoon.core.email.resend") as mock_resend:
        mock_resend.api_key = None
        init_resend(settings)

    assert mock_resend.api_key is None


def test_send_verification_email(settings):
    url = "http://api.test/auth/verify-email?token=abc"

    with patch("cocoon.core.email.resend.Emails.send") as mock_send:
        EmailService(settings).send_verification_email("user@example.com", url)

    mock_send.assert_called_once()
    params = mock_send.call_args[0][0]
    assert params["from"] == "Cocoon <noreply@cocoon.test>"
    assert params["to"] == "user@example.com"
    assert params["subject"] == "Cocoon - Verify Your Email"
    assert url in params["html"]
    assert "expires in 10 minutes" in params["html"]


def test_send_subscription_confirmation(settings):
    with patch("cocoon.core.email.resend.Emails.send") as mock_send:
        EmailService(settings).send_subscription_confirmation("fan@example.com")

    params = mock_send.call_args[0][0]
    assert params["to"] == "fan@example.com"
    assert params["subject"] == "Cocoon - Thanks for subscribing"
    assert 'href="http://shop.test"' in params["html"]
