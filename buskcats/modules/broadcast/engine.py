"""
Broadcast Engine
================

Sends one email per confirmed subscriber of a list, each with its own
unsubscribe link. A failing recipient is logged and counted but does not
stop the remaining sends; the caller gets both tallies back.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List

from buskcats.core.errors import TransportError
from buskcats.core.logging_service import db_log
from buskcats.modules.email.email_service import with_unsubscribe_footer

logger = logging.getLogger(__name__)


@dataclass
class BroadcastResult:
    sent: int = 0
    failed: int = 0
    failures: List[str] = field(default_factory=list)

    def to_dict(self):
        return {'sent': self.sent, 'failed': self.failed}


class Broadcaster:

    def __init__(self, store, email_service, subscriptions, send_interval=0.0):
        self.store = store
        self.email_service = email_service
        self.subscriptions = subscriptions
        self.send_interval = send_interval

    def broadcast(self, list_name: str, subject: str, html_body: str) -> BroadcastResult:
        recipients = self.store.list_confirmed(list_name)
        result = BroadcastResult()
        logger.info(f"Broadcasting '{subject}' to {len(recipients)} subscriber(s) on {list_name}")

        for i, subscriber in enumerate(recipients):
            body = with_unsubscribe_footer(
                html_body, self.subscriptions.unsubscribe_url(subscriber.token)
            )
            try:
                self.email_service.send_email(subscriber.email, subject, body)
                result.sent += 1
            except TransportError as e:
                logger.error(f"Error sending to {subscriber.email}: {e}")
                result.failed += 1
                result.failures.append(subscriber.email)

            if self.send_interval and i < len(recipients) - 1:
                time.sleep(self.send_interval)

        if result.failed:
            logger.warning(f"Broadcast completed with errors: {result.sent} sent, {result.failed} failed")
            db_log('warning', 'broadcast', f"Broadcast '{subject}' to {list_name} had failures",
                   {'sent': result.sent, 'failed': result.failed, 'failures': result.failures})
        else:
            logger.info(f"Broadcast sent successfully to {result.sent} recipients: {subject}")
            db_log('info', 'broadcast', f"Broadcast '{subject}' to {list_name}", {'sent': result.sent})
        return result
