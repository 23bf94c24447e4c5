"""FastAPI composition root: wires persistence and the import runner at startup."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from haulpay.api.routes import field_map, health, imports, transactions
from haulpay.core.config import AppSettings
from haulpay.core.exceptions import ImportJobNotFoundError, StorageError, UnknownFieldError
from haulpay.core.logging import setup_logging
from haulpay.core.protocols import IEmployeeDirectory, IFieldMapStore, ITransactionStore
from haulpay.persistence import create_persistence
from haulpay.services.import_runner import ImportRunner


def create_app(
    settings: AppSettings | None = None,
    *,
    store: ITransactionStore | None = None,
    directory: IEmployeeDirectory | None = None,
    field_map_store: IFieldMapStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Backends not passed in are built from settings when the app starts.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Initialize and tear down application resources."""
        app_settings = settings or AppSettings()
        setup_logging(app_settings)

        wired_store, wired_directory, wired_field_maps = store, directory, field_map_store
        if wired_store is None or wired_directory is None or wired_field_maps is None:
            default_store, default_directory, default_field_maps = create_persistence(app_settings)
            wired_store = wired_store or default_store
            wired_directory = wired_directory or default_directory
            wired_field_maps = wired_field_maps or default_field_maps

        runner = ImportRunner(
            store=wired_store,
            directory=wired_directory,
            field_map_store=wired_field_maps,
            config=app_settings.imports,
        )
        app.state.settings = app_settings
        app.state.store = wired_store
        app.state.directory = wired_directory
        app.state.field_map_store = wired_field_maps
        app.state.runner = runner
        try:
            yield
        finally:
            runner.shutdown()

    app = FastAPI(
        title="Haulpay Fuel Import",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(imports.router)
    app.include_router(field_map.router)
    app.include_router(transactions.router)

    @app.exception_handler(ImportJobNotFoundError)
    async def _job_not_found(request: Request, exc: ImportJobNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(UnknownFieldError)
    async def _unknown_field(request: Request, exc: UnknownFieldError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    return app
