"""
Email Service - transactional email over SMTP.

Features:
- Thin SMTP client wrapper (smtplib + EmailMessage, HTML bodies)
- Branded templates for welcome, password reset and email verification
- Never raises to the caller: failures are logged and reported as False

Sending is skipped entirely when SMTP_HOST is not configured, which is the
normal state for local development and tests.
"""

import html
import logging
import smtplib
from datetime import datetime
from email.message import EmailMessage
from typing import Optional

from gigit.core.config import get_settings

logger = logging.getLogger(__name__)

BRAND_COLOR = "#2563eb"


class EmailClient:
    """SMTP client configured from settings."""

    def __init__(self):
        settings = get_settings()
        self.host = settings.smtp_host
        self.port = settings.smtp_port
        self.username = settings.smtp_username
        self.password = settings.smtp_password
        self.use_tls = settings.smtp_use_tls
        self.sender = settings.email_from

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def send(self, to: str, subject: str, html_body: str) -> bool:
        """
        Send one HTML email.

        Returns:
            True when the SMTP server accepted the message, else False
        """
        if not self.enabled:
            logger.info("SMTP not configured, skipping email '%s' to %s", subject, to)
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html_body, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as smtp:
                if self.use_tls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError):
            logger.exception("Failed to send email '%s' to %s", subject, to)
            return False

        logger.info("Sent email '%s' to %s", subject, to)
        return True


# Singleton
_email_client = None

def get_email_client() -> EmailClient:
    global _email_client
    if _email_client is None:
        _email_client = EmailClient()
    return _email_client


def render_email(heading: str, name: Optional[str], paragraphs: list, button_label: str,
                 url: str, footer_note: str, expiry_note: Optional[str] = None) -> str:
    """Wrap content in the GigIt email layout."""
    greeting = f"Hi {html.escape(name)}," if name else "Hi,"
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    expiry = (
        f'<p style="font-size: 14px; color: #666; margin-top: 20px;">{expiry_note}</p>'
        if expiry_note else ""
    )
    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
  </head>
  <body style="font-family: Arial, sans-serif; line-height: 1.6; color: #333; max-width: 600px; margin: 0 auto; padding: 20px;">
    <div style="text-align: center; margin-bottom: 30px;">
      <h1 style="color: {BRAND_COLOR}; margin: 0;">GigIt</h1>
    </div>
    <div style="background-color: #f9fafb; border-radius: 8px; padding: 30px; margin-bottom: 20px;">
      <h2 style="margin-top: 0;">{heading}</h2>
      <p>{greeting}</p>
      {body}
      <div style="text-align: center; margin: 30px 0;">
        <a href="{url}" style="display: inline-block; background-color: {BRAND_COLOR}; color: white; padding: 12px 30px; text-decoration: none; border-radius: 6px; font-weight: 600;">{button_label}</a>
      </div>
      <p style="font-size: 14px; color: #666;">Or copy and paste this link into your browser:</p>
      <p style="font-size: 14px; color: {BRAND_COLOR}; word-break: break-all;">{url}</p>
      {expiry}
    </div>
    <div style="text-align: center; font-size: 12px; color: #999;">
      <p>{footer_note}</p>
      <p>&copy; {datetime.utcnow().year} GigIt. All rights reserved.</p>
    </div>
  </body>
</html>
"""


def send_welcome_email(email: str, name: Optional[str] = None) -> bool:
    login_url = f"{get_settings().app_url}/login"
    body = render_email(
        "Welcome to GigIt!",
        name,
        [
            "Your account is now active. You're all set to start using GigIt!",
            "Workers can browse jobs and apply in a few clicks. Businesses can post jobs and hire skilled workers.",
        ],
        "Go to GigIt",
        login_url,
        "You received this email because you created a GigIt account.",
    )
    return get_email_client().send(email, "Welcome to GigIt!", body)


def send_password_reset_email(email: str, token: str, name: Optional[str] = None) -> bool:
    reset_url = f"{get_settings().app_url}/reset-password?token={token}"
    body = render_email(
        "Reset your password",
        name,
        ["We received a request to reset your password. Click the button below to create a new password:"],
        "Reset Password",
        reset_url,
        "If you didn't request a password reset, you can safely ignore this email. Your password will not be changed.",
        expiry_note="This link will expire in 1 hour.",
    )
    return get_email_client().send(email, "Reset your GigIt password", body)


def send_verification_email(email: str, token: str, name: Optional[str] = None) -> bool:
    verify_url = f"{get_settings().app_url}/verify-email?token={token}"
    body = render_email(
        "Verify your email address",
        name,
        ["Thanks for signing up for GigIt! Please verify your email address by clicking the button below:"],
        "Verify Email",
        verify_url,
        "If you didn't create an account with GigIt, you can safely ignore this email.",
        expiry_note="This link will expire in 24 hours.",
    )
    return get_email_client().send(email, "Verify your GigIt email", body)
