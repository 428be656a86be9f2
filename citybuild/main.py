import logging
from typing import Optional

from fastapi import FastAPI

from citybuild.api.v1.router import v1_router
from citybuild.core.config import Settings, get_settings
from citybuild.core.logging import configure_logging
from citybuild.core.middleware import RequestIdMiddleware
from citybuild.services.data_seeder import DataSeeder
from citybuild.services.local_storage import LocalStore, StorageErrorCallback
from citybuild.services.mock_api import MockApi
from citybuild.services.repositories import Repositories

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[LocalStore] = None,
    on_storage_error: Optional[StorageErrorCallback] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
    )

    store = store or LocalStore.from_settings(settings, on_error=on_storage_error)
    if settings.seed_on_startup:
        DataSeeder(store).seed_initial_data()

    app.state.settings = settings
    app.state.store = store
    app.state.mock_api = MockApi(
        Repositories.from_store(store),
        latency_scale=settings.mock_api_latency_scale,
        settings=settings,
    )
    logger.info(
        "app configured",
        extra={"environment": settings.environment, "storage_backend": settings.storage_backend},
    )

    # Middleware: Request ID
    app.add_middleware(RequestIdMiddleware, header_name=settings.request_id_header)

    # API v1
    app.include_router(v1_router, prefix=settings.api_prefix)

    return app


app = create_app()
