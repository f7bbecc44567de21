"""Subscription documents."""

from pydantic import EmailStr

from cocoon.core.mixins import TimestampMixin
from cocoon.db.document import Document


class Subscription(TimestampMixin, Document):
    email: EmailStr
