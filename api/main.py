from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.config import settings
from api.router import router

log = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="PV yield and tariff engine")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix="/api")

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    log.info("API ready, default location %s.", settings.DEFAULT_LOCATION)
    return app
