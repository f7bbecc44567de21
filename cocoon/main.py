from contextlib import asynccontextmanager

from fastapi import FastAPI

from cocoon.core.cors import add_cors_middleware
from cocoon.core.email import init_resend
from cocoon.core.exception_handlers import register_exception_handlers
from cocoon.core.http import close_oauth_client
from cocoon.core.logging import configure_logging
from cocoon.core.request_logging import add_request_logging_middleware
from cocoon.core.settings import get_settings
from cocoon.db.mongo import close_client, ensure_indexes, get_database
from cocoon.router import api_router

configure_logging()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_resend(get_settings())
    ensure_indexes(get_database())
    yield
    await close_oauth_client()
    close_client()


app = FastAPI(title="Cocoon", version="0.1.0", lifespan=lifespan)

app.include_router(api_router)

add_request_logging_middleware(app)
add_cors_middleware(app, get_settings())
register_exception_handlers(app)
