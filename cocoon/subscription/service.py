"""Newsletter subscriptions."""

import logging

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from cocoon.core.email import EmailService
from cocoon.db.mongo import Collections
from cocoon.subscription.exceptions import AlreadySubscribedError
from cocoon.subscription.models import Subscription
from cocoon.user.repository import normalize_email

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self, db: Database, email: EmailService):
        self._subscriptions = db[Collections.SUBSCRIPTIONS]
        self._email = email

    def subscribe(self, address: str) -> Subscription:
        """Store a subscription and send a confirmation email.

        The confirmation is best-effort; a failed send does not undo the
        subscription.

        Raises:
            AlreadySubscribedError: If the email is already subscribed
        """
        subscription = Subscription(email=normalize_email(address))
        try:
            self._subscriptions.insert_one(subscription.to_mongo())
        except DuplicateKeyError:
            raise AlreadySubscribedError() from None

        try:
            self._email.send_subscription_confirmation(subscription.email)
        except Exception:
            logger.warning(
                "Subscription confirmation failed for %s",
                subscription.id,
                exc_info=True,
            )
        return subscription
