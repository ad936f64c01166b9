from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from guestlist.common.logging import configure_logging
from guestlist.common.settings import Settings, get_settings
from guestlist.database.core.main import Database
from guestlist.services.api.errors import install_error_handlers
from guestlist.services.api.routers import auth, health, people, rsvp
from guestlist.services.hashing.bcrypt_hasher import BcryptHasher


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    cfg = settings or get_settings()
    configure_logging(cfg.log_level)
    app = FastAPI(
        title=f"{cfg.app_name} API",
        version="0.1.0",
        docs_url=f"{cfg.api.prefix}/docs",
        openapi_url=f"{cfg.api.prefix}/openapi.json",
    )

    app.state.settings = cfg
    app.state.database = database or Database(settings=cfg)
    app.state.hasher = BcryptHasher(rounds=cfg.auth.bcrypt_rounds)

    allow_origins = ["*"] if cfg.is_development else cfg.api.cors_allow_origins
    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_methods=cfg.api.cors_allow_methods,
        allow_headers=cfg.api.cors_allow_headers,
        allow_credentials=cfg.api.cors_allow_credentials,
    )

    install_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(auth.router, prefix=cfg.api.prefix)
    app.include_router(rsvp.router, prefix=cfg.api.prefix)
    app.include_router(people.router, prefix=cfg.api.prefix)
    return app
