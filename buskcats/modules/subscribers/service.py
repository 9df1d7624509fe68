"""
Subscription state machine and admin operations.

States: Pending (confirmed=0), Confirmed (confirmed=1), Absent (no row).

    subscribe    Absent -> Pending       (sends confirmation email)
    confirm      Pending -> Confirmed    (no-op success when already Confirmed)
    unsubscribe  Pending|Confirmed -> Absent
    admin_add    Absent -> Confirmed     (no email)
    admin_delete Pending|Confirmed -> Absent, by email and optional list

The token is the only credential for confirm/unsubscribe.
"""

import logging
from typing import List, Optional
from urllib.parse import urlencode

from buskcats.core.errors import ConflictError, NotFoundError, UniqueViolation
from buskcats.core.logging_service import db_log

from .payloads import normalize_email, normalize_list
from .store import Subscriber, SubscriberStore
from .tokens import generate_token

logger = logging.getLogger(__name__)


def build_link(public_url: str, path: str, token: str) -> str:
    return f"{public_url}{path}?{urlencode({'token': token})}"


class SubscriptionService:

    def __init__(self, store: SubscriberStore, email_service, settings):
        self.store = store
        self.email_service = email_service
        self.settings = settings

    def confirm_url(self, token: str) -> str:
        return build_link(self.settings.public_url, '/confirm', token)

    def unsubscribe_url(self, token: str) -> str:
        return build_link(self.settings.public_url, '/unsubscribe', token)

    def _create(self, email: str, list_name: str, confirmed: bool) -> Subscriber:
        try:
            return self.store.insert(email, list_name, generate_token(), confirmed=confirmed)
        except UniqueViolation:
            # Same answer for Pending and Confirmed rows
            raise ConflictError('Already subscribed') from None

    def subscribe(self, email: str, list_name: str) -> Subscriber:
        """
        Create a Pending record and email its confirmation link.

        A transport failure propagates after the insert; the row stays
        Pending, so a retried subscribe gets a conflict instead of a duplicate.
        """
        record = self._create(email, list_name, confirmed=False)
        logger.info(f"New pending subscription: {email} on {list_name}")
        db_log('info', 'subscribers', f'New subscriber: {email}', {'list': list_name})

        self.email_service.send_confirmation_email(email, self.confirm_url(record.token))
        logger.info(f"Confirmation email sent to: {email}")
        return record

    def confirm(self, token: str) -> None:
        if not self.store.set_confirmed_by_token(token):
            raise NotFoundError('Token not found')
        logger.info("Subscription confirmed")

    def unsubscribe(self, token: str) -> None:
        if not self.store.delete_by_token(token):
            raise NotFoundError('Token not found')
        logger.info("Subscription removed by token")
        db_log('info', 'subscribers', 'Unsubscribed via token link')

    # ===================
    # ADMIN OPERATIONS
    # ===================

    def admin_add(self, email: str, list_name: str) -> Subscriber:
        """Backfill a known-good address directly in the Confirmed state"""
        record = self._create(email, list_name, confirmed=True)
        logger.info(f"Admin added confirmed subscriber: {email} on {list_name}")
        db_log('info', 'subscribers', f'Admin added subscriber: {email}', {'list': list_name})
        return record

    def admin_list(self, list_name: Optional[str] = None) -> List[Subscriber]:
        return self.store.list_by_optional_list(normalize_list(list_name) or None)

    def admin_delete(self, email: str, list_name: Optional[str] = None) -> int:
        email = normalize_email(email)
        list_name = normalize_list(list_name) or None
        deleted = self.store.delete_by_email(email, list_name)
        if not deleted:
            raise NotFoundError('Not found')
        logger.info(f"Admin deleted {deleted} record(s) for {email} (list: {list_name or 'all'})")
        db_log('info', 'subscribers', f'Admin deleted subscriber: {email}',
               {'list': list_name, 'deleted': deleted})
        return deleted
