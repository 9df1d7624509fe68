"""
Email Service Module
====================

Outbound email transport supporting Resend (HTTP API) and SMTP.
Provider is selected via EMAIL_PROVIDER ('resend' or 'smtp').

``send_email`` sends exactly one message and raises TransportError on any
failure, so callers decide whether a failed send aborts their operation.
"""

import html
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import requests

from buskcats.core.errors import TransportError

logger = logging.getLogger(__name__)

RESEND_API_URL = 'https://api.resend.com/emails'
REQUEST_TIMEOUT = 15


class EmailService:
    """
    Email transport configured from a Settings snapshot.

    Settings used:
        email_provider: 'resend' (default) or 'smtp'
        sender_email: From address
        resend_api_key: Resend API key (provider 'resend')
        smtp_host, smtp_port, smtp_password: SMTP server (provider 'smtp')
    """

    def __init__(self, settings=None):
        self.provider = 'resend'
        self.sender_email = None
        self.api_key = None
        self.smtp_host = 'smtp.gmail.com'
        self.smtp_port = 587
        self.smtp_password = None

        if settings is not None:
            self.init_settings(settings)

    def init_settings(self, settings):
        self.provider = settings.email_provider
        self.sender_email = settings.sender_email
        logger.info(f"=== INITIALIZING EMAIL SERVICE (provider: {self.provider}) ===")
        logger.info(f"Sender email: {self.sender_email}")

        if self.provider == 'smtp':
            self.smtp_host = settings.smtp_host
            self.smtp_port = int(settings.smtp_port)
            self.smtp_password = settings.smtp_password
            if not self.smtp_password:
                logger.warning("EMAIL_PASSWORD not configured - SMTP email sending disabled")
        else:
            self.api_key = settings.resend_api_key
            if not self.api_key:
                logger.warning("RESEND_API_KEY not configured - email sending disabled")

    def send_email(self, to: str, subject: str, html_body: str,
                   text_body: Optional[str] = None) -> str:
        """
        Send a single email via the configured provider.

        Returns:
            str: provider message id (empty for SMTP)

        Raises:
            TransportError: the provider is unconfigured or rejected the send
        """
        if not self.sender_email:
            raise TransportError("Sender email not configured")

        logger.info(f"Sending email from: {self.sender_email} to: {to} (subject: {subject})")
        if self.provider == 'smtp':
            return self._send_via_smtp(to, subject, html_body, text_body)
        return self._send_via_resend(to, subject, html_body, text_body)

    def _send_via_resend(self, recipient: str, subject: str, html_body: str,
                         text_body: Optional[str] = None) -> str:
        """Send a single email via the Resend API"""
        if not self.api_key:
            raise TransportError("Resend API key not configured")

        payload = {
            "from": self.sender_email,
            "to": [recipient],
            "subject": subject,
            "html": html_body,
        }
        if text_body:
            payload["text"] = text_body

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            resp = requests.post(RESEND_API_URL, headers=headers, json=payload, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise TransportError(f"Resend request failed for {recipient}: {e}") from e

        if not resp.ok:
            raise TransportError(f"Resend API error: {resp.status_code} {resp.text}")

        try:
            message_id = resp.json().get('id', '')
        except ValueError:
            message_id = ''
        logger.debug(f"Email sent successfully to: {recipient}, ID: {message_id}")
        return message_id

    def _send_via_smtp(self, recipient: str, subject: str, html_body: str,
                       text_body: Optional[str] = None) -> str:
        """Send a single email via SMTP (e.g. Gmail)"""
        if not self.smtp_password:
            raise TransportError("SMTP password not configured")

        msg = MIMEMultipart('alternative')
        msg['From'] = self.sender_email
        msg['To'] = recipient
        msg['Subject'] = subject

        if text_body:
            msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                server.starttls()
                server.login(self.sender_email, self.smtp_password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise TransportError(f"SMTP error for {recipient}: {e}") from e

        logger.info(f"SMTP email sent to {recipient}")
        return ''

    # ==================== Subscription Emails ====================

    def send_confirmation_email(self, email: str, confirm_url: str) -> str:
        """Send the double opt-in confirmation link"""
        subject = "Confirm your subscription"
        html_body = (
            '<p>Thanks for subscribing! Please '
            f'<a href="{html.escape(confirm_url, quote=True)}">click here to confirm</a>.</p>'
        )
        text_body = f"Thanks for subscribing! Confirm your subscription here: {confirm_url}"
        return self.send_email(email, subject, html_body, text_body)


def with_unsubscribe_footer(html_body: str, unsubscribe_url: str) -> str:
    """Append the per-recipient unsubscribe link to a broadcast body"""
    link = html.escape(unsubscribe_url, quote=True)
    return f'{html_body}<p><a href="{link}">Unsubscribe</a></p>'
