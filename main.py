import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.core.config import app_settings
from src.core.logging_config import setup_logging
from src.db.models import Base
from src.db.session import async_engine
from src.routers import results as results_router
from src.routers import surveys as surveys_router

# Configure logging VERY early
setup_logging(app_settings.log_level, json_output=app_settings.log_json)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create_all leaves existing tables untouched.
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"{app_settings.name} started")
    yield
    await async_engine.dispose()
    logger.info(f"{app_settings.name} stopped")


app = FastAPI(title=app_settings.name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Include Routers ---
app.include_router(results_router.router, prefix=app_settings.api_prefix, tags=["results"])
app.include_router(surveys_router.router, prefix=app_settings.api_prefix, tags=["surveys"])


@app.get("/health", tags=["Health Check"])
async def health():
    """Basic liveness check."""
    return {"status": "ok", "service": app_settings.name}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=False)
