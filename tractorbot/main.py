"""Main entry point for the Hallo Tractor WhatsApp bot."""

import asyncio
from contextlib import asynccontextmanager

from dotenv import load_dotenv
# LogConfig reads LOG_* with os.getenv when tractorbot.logging is imported
load_dotenv()

import structlog
import uvicorn
from fastapi import FastAPI

from tractorbot.api.middleware import RequestLoggingMiddleware
from tractorbot.api.routes.sessions import router as sessions_router
from tractorbot.api.routes.whatsapp import router as whatsapp_router
from tractorbot.catalog.store import load_catalog_file, seed_catalog
from tractorbot.config.settings import settings
from tractorbot.db.base import init_db
from tractorbot.logging import configure_production_logging

configure_production_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and seed the catalog before serving."""
    if settings.session_backend == "sql":
        await init_db()
        inserted = await seed_catalog(load_catalog_file(settings.catalog_path))
        logger.info(
            "Database initialized",
            is_postgres=settings.is_postgres,
            catalog_items_inserted=inserted,
        )
    yield


app = FastAPI(title="Hallo Tractor", lifespan=lifespan)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(whatsapp_router)
app.include_router(sessions_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}


async def main():
    """Serve the webhook with uvicorn."""
    logger.info("Starting server", host=settings.api_host, port=settings.api_port)
    config = uvicorn.Config(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="info" if settings.environment == "production" else "warning",
    )
    server = uvicorn.Server(config)
    await server.serve()


if __name__ == "__main__":
    asyncio.run(main())
