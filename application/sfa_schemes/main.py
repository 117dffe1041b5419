from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import os
from dotenv import load_dotenv

from sfa_schemes.logging.utils import initialize_logging, get_app_logger
from sfa_schemes.middlewares.logging_middleware import RequestLoggingMiddleware
from sfa_schemes.connections.database import close_db_pool

load_dotenv()

# Initialize Sentry (must be done early, before other imports)
from sfa_schemes.config.sentry import init_sentry
init_sentry()

# Initialize structured logging
initialize_logging()
logger = get_app_logger('sfa_schemes.main')

# Settings
from sfa_schemes.config.settings import SchemeEngineConfigs
configs = SchemeEngineConfigs()

# Debug mode detection (DEBUG=false means production)
DEBUG = os.getenv("DEBUG", "true").lower() == "true"

logger.info(f"Running in {'debug' if DEBUG else 'production'} mode")


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info("Starting SFA scheme engine")
    yield
    logger.info("Shutting down SFA scheme engine")
    close_db_pool()

# Disable docs in production (when DEBUG=false)
docs_url = "/docs" if DEBUG else None
redoc_url = "/redoc" if DEBUG else None

app = FastAPI(
    title="SFA Scheme Engine",
    version=configs.APP_VERSION,
    lifespan=lifespan,
    docs_url=docs_url,
    redoc_url=redoc_url
)

allowed_origins = os.getenv("ALLOWED_ORIGINS")
if allowed_origins:
   origins = [origin.strip() for origin in allowed_origins.split(",")]
else:
   origins = ["*"]

app.add_middleware(RequestLoggingMiddleware)

logger.info(f"Configuring CORS with allowed origins: {origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register custom exception handlers
from sfa_schemes.middlewares.handlers import register_exception_handlers
register_exception_handlers(app)


# Routes
from sfa_schemes.routes.schemes import schemes_router
from sfa_schemes.routes.health import router as health_router

app.include_router(schemes_router, prefix="/schemes/v1")
app.include_router(health_router, tags=["health"])
