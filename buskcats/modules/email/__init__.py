"""
Email Module
============

Provides the outbound email transport (Resend API or SMTP) and the
subscription email templates.
"""

from .email_service import EmailService, with_unsubscribe_footer

__all__ = ['EmailService', 'with_unsubscribe_footer']
