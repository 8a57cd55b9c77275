import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foresight.config import settings
from foresight.core.errors import register_error_handlers
from foresight.core.middleware import AccessLogMiddleware, RequestIDMiddleware
from foresight.routers import analytics

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("foresight")

app = FastAPI(
    title=settings.app_name,
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# Middleware: order matters (last added = outermost = first to execute)
app.add_middleware(RequestIDMiddleware)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
    expose_headers=["x-request-id"],
)

# Error handlers
register_error_handlers(app)

# Routers
app.include_router(analytics.router)

logger.info("%s started env=%s", settings.app_name, settings.app_env)


@app.get("/health")
async def health_check():
    return {"status": "ok", "app": settings.app_name, "version": "0.1.0"}
