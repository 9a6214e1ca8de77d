import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load env from checkhealth/.env
app_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(app_dir, ".env"))

from checkhealth.core.config import settings, validate_config
from checkhealth.core.logging import configure_logging
from checkhealth.core.middleware.request_id import RequestIdMiddleware
from checkhealth.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from checkhealth.api import goals, health

configure_logging(settings.ENV)
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("checkhealth")
    logger.info("Starting Check Health goals service...")
    try:
        yield
    finally:
        logging.getLogger("checkhealth").info("Stopping Check Health goals service...")


app = FastAPI(title="Check Health - Goals", lifespan=lifespan)

app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ALLOWED_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(goals.router, tags=["goals"])
app.include_router(health.root_router, tags=["health"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("checkhealth.main:app", host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
