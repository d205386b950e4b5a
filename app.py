"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo import AsyncMongoClient

from config import AppSettings, TokenSettings
from errors import register_error_handlers
from infrastructure.identity.bound_token import BoundTokenIdentityProvider
from infrastructure.identity.protocol import IdentityProvider
from infrastructure.token_store.memory import InMemoryTokenStore
from infrastructure.token_store.mongo import MongoTokenStore
from infrastructure.token_store.protocol import TokenStore
from routes.health_routes import router as health_router
from routes.token_routes import router as token_router
from services.token_manager import TokenManager
from shared.crypto import TokenHasher
from shared.generators import SecretGenerator
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def build_token_manager(store: TokenStore, settings: TokenSettings) -> TokenManager:
    """Wire a TokenManager from token settings."""
    lifetime = settings.token_unused_lifetime_seconds
    return TokenManager(
        store,
        TokenHasher(settings.token_hmac_key),
        SecretGenerator(
            id_prefix=settings.token_id_prefix,
            id_bytes=settings.token_id_bytes,
            secret_bytes=settings.token_secret_bytes,
        ),
        last_used_update_interval=timedelta(
            seconds=settings.token_last_used_update_interval_seconds
        ),
        unused_token_lifetime=timedelta(seconds=lifetime) if lifetime else None,
        max_tokens_per_owner=settings.token_max_per_owner,
    )


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    store: Optional[TokenStore] = None,
    identity_provider: Optional[IdentityProvider] = None,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    Args:
        settings: defaults to AppSettings() read from the environment.
        store: overrides the store chosen from settings (MongoDB when
            MONGODB_URI is set, in-memory otherwise).
        identity_provider: resolves the owner for token management; defaults
            to BoundTokenIdentityProvider.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(settings.logging)

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    if not settings.tokens.token_hmac_key:
        raise RuntimeError("TOKEN_HMAC_KEY (or SECRET_KEY) must be set")

    mongo_client: Optional[AsyncMongoClient] = None
    if store is None:
        if settings.db.mongodb_uri:
            mongo_client = AsyncMongoClient(settings.db.mongodb_uri, tz_aware=True)
            store = MongoTokenStore.from_database(
                mongo_client[settings.db.db_name],
                transactional=settings.db.mongodb_transactions,
            )
        else:
            log.warning("token_store_in_memory", reason="MONGODB_URI not set")
            store = InMemoryTokenStore()

    manager = build_token_manager(store, settings.tokens)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        app.state.settings = settings
        app.state.token_manager = manager
        app.state.identity_provider = identity_provider or BoundTokenIdentityProvider(
            manager
        )

        if isinstance(store, MongoTokenStore):
            await store.ensure_indexes()

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        if mongo_client is not None:
            await mongo_client.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(token_router)

    return app
