from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import traceback
from .config import settings
from .routers import campaigns
from .routers import dashboard
from .middleware.security import SecurityHeadersMiddleware
from .services.meta_service import MetaAPIError, MetaConfigError
from .utils.logger import setup_logging

setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Ads Panel API",
    description="Facebook Ads campaign metrics proxy and dashboard",
    version="1.0.0",
    redirect_slashes=False
)

@app.exception_handler(MetaConfigError)
async def meta_config_error_handler(request: Request, exc: MetaConfigError):
    logger.error(f"[Config] {exc}")
    return JSONResponse(status_code=400, content={"error": str(exc)})

@app.exception_handler(MetaAPIError)
async def meta_api_error_handler(request: Request, exc: MetaAPIError):
    return JSONResponse(
        status_code=500,
        content={
            "message": "Failed to fetch data from the Facebook API.",
            "error": exc.payload,
        }
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unexpected errors still answer with JSON"""
    error_traceback = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"[API] Unhandled error on {request.method} {request.url.path}: {exc}\n{error_traceback}")

    error_detail = {
        "detail": f"Internal server error: {str(exc)}",
        "error": str(exc),
        "error_type": type(exc).__name__,
        "traceback": error_traceback if settings.DEBUG else None
    }
    return JSONResponse(status_code=500, content=error_detail)

app.add_middleware(SecurityHeadersMiddleware)

# CORS middleware (added last so it wraps everything else)
cors_origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials="*" not in cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
async def health_check():
    return {"status": "ok"}

app.include_router(campaigns.router, prefix="/api/campaigns", tags=["campaigns"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

@app.get("/")
async def root():
    return {"message": "Ads Panel API"}
