"""Central API router aggregating all domain routers."""

from fastapi import APIRouter

from cocoon.auth.router import router as auth_router
from cocoon.catalog.router import router as catalog_router
from cocoon.health.router import router as health_router
from cocoon.order.router import router as order_router
from cocoon.subscription.router import router as subscription_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(order_router)
api_router.include_router(catalog_router)
api_router.include_router(subscription_router)
