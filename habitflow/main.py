# habitflow/main.py
import asyncio
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from habitflow.api.api import api_router
from habitflow.core.config import settings
from habitflow.core.logging import setup_logging
from habitflow.core.error_handlers import register_exception_handlers
from habitflow.core.middleware import register_middlewares
from habitflow.db.base import SessionLocal
from habitflow.db.session import init_db
from habitflow.services import register_services
from habitflow.services.shop_service import ShopService
from habitflow.utils.cache import TTLCache

# Set up the logger at the start
logger = setup_logging()


# Background task deactivating expired shop purchases
async def expire_purchases(cache: TTLCache):
    while True:
        try:
            db = SessionLocal()
            try:
                expired = ShopService(db, cache).expire_purchases()
                if expired > 0:
                    logger.info(f"Deactivated {expired} expired purchases")
            finally:
                db.close()

            await asyncio.sleep(settings.PURCHASE_EXPIRY_CHECK_INTERVAL)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in background task: {str(e)}", exc_info=True)
            # Wait for a minute before retrying
            await asyncio.sleep(60)


# Context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting HabitFlow API {app.version}")

    register_services()
    logger.info("Services registered")

    init_db()

    background_task = asyncio.create_task(expire_purchases(app.state.cache))

    yield

    # Cancel background tasks on shutdown
    logger.info("Shutting down application and background tasks")
    background_task.cancel()
    try:
        await background_task
    except asyncio.CancelledError:
        logger.info("Background tasks cancelled successfully")


app = FastAPI(
    title="HabitFlow API",
    description="API for a gamified habit tracker with a points shop and community",
    version="0.1.0",
    lifespan=lifespan,
)

# One cache per application, handed to services by the dependency registry
app.state.cache = TTLCache(
    max_size=settings.CACHE_MAX_SIZE, default_ttl=settings.CACHE_TTL_SECONDS
)

# Register custom exception handlers
register_exception_handlers(app)

# Register middleware
register_middlewares(app)

# Set up CORS middleware
if settings.BACKEND_CORS_ORIGINS:
    allowed_origins = [str(origin) for origin in settings.BACKEND_CORS_ORIGINS]
    logger.info(f"Setting up CORS with allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    return {"message": "Welcome to the HabitFlow API"}


@app.get("/health")
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}


def create_app():
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
