from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cocoon.core.settings import Settings


def add_cors_middleware(app: FastAPI, settings: Settings):
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
