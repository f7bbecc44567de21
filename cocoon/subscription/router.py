"""Subscription domain router."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr

from cocoon.core.constants import CommonResponses, Routes
from cocoon.core.deps import DatabaseDep, EmailServiceDep
from cocoon.core.responses import MessageEnvelope, message
from cocoon.subscription.service import SubscriptionService


class SubscribeRequest(BaseModel):
    email: EmailStr


def get_subscription_service(
    db: DatabaseDep, email: EmailServiceDep
) -> SubscriptionService:
    return SubscriptionService(db, email)


SubscriptionServiceDep = Annotated[
    SubscriptionService, Depends(get_subscription_service)
]

router = APIRouter(
    prefix=Routes.SUBSCRIPTIONS.prefix,
    tags=[Routes.SUBSCRIPTIONS.tag],
    responses={**CommonResponses.BAD_REQUEST},
)


@router.post(
    "",
    response_model=MessageEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def subscribe(payload: SubscribeRequest, subscriptions: SubscriptionServiceDep):
    """Subscribe an email address to the newsletter."""
    subscriptions.subscribe(payload.email)
    return message("Subscribed successfully")
