"""
FastAPI app assembly: store lifecycle and router wiring.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Configure logging
LOG_LEVEL_NAME = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL = getattr(logging, LOG_LEVEL_NAME, logging.INFO)
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)
logger.setLevel(LOG_LEVEL)

from submission_store.api.submissions import router as submissions_router  # noqa: E402
from submission_store.config import DBConfig  # noqa: E402
from submission_store.db.database import DatabaseContext  # noqa: E402


@asynccontextmanager
async def lifespan(app: FastAPI):
    ctx = DatabaseContext(DBConfig.from_env())
    await ctx.connect()
    app.state.db = ctx
    logger.info("app_startup: log_level=%s", LOG_LEVEL_NAME)
    try:
        yield
    finally:
        await ctx.close()


app = FastAPI(
    title="Submission Store",
    description="Tenant-scoped storage for form submissions.",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(submissions_router)


@app.get("/health")
def health():
    return {"status": "ok"}
