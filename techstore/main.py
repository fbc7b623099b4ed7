"""
FastAPI application for the TechStore inventory.
- The database handle is built here and injected everywhere else
- Preflight database test on startup
- Tables created if missing
"""
from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from contextlib import asynccontextmanager
from typing import Optional
import logging

from techstore.config import Settings, settings as default_settings
from techstore.database import Database
from techstore.dependencies import get_db
from techstore.engine import InventoryEngine
from techstore.routers import catalog_router, inventory_router, reports_router

logger = logging.getLogger(__name__)


def create_app(database: Optional[Database] = None, app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings
    database = database or Database.from_settings(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {app_settings.APP_NAME} {app_settings.APP_VERSION}")

        logger.info("Running preflight database test...")
        success, message = database.test_connection()
        if not success:
            logger.error(f"Preflight test failed: {message}")
        else:
            logger.info(f"Preflight test passed: {message}")

        database.create_all()
        logger.info("Database tables verified")

        yield

        database.dispose()
        logger.info(f"Shutting down {app_settings.APP_NAME}")

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Catalog, stock movements and inventory reports",
        version=app_settings.APP_VERSION,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.database = database
    app.state.inventory_engine = InventoryEngine(database)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(catalog_router, prefix="/api")
    app.include_router(inventory_router, prefix="/api")
    app.include_router(reports_router, prefix="/api")

    @app.get("/health")
    def health_check(db: Session = Depends(get_db)):
        """System health check; reports database status instead of failing"""
        try:
            db.execute(text("SELECT 1"))
            db_status = "connected"
        except SQLAlchemyError as e:
            db_status = f"error: {e}"
            logger.warning(f"Health check database error: {e}")

        return {
            "status": "healthy",
            "service": "techstore-inventory",
            "database": db_status,
            "version": app_settings.APP_VERSION,
        }

    return app


logging.basicConfig(level=default_settings.LOG_LEVEL)

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("techstore.main:app", host="0.0.0.0", port=8000)
