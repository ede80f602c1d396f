from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from assetguard.api.routes import router as api_router
from assetguard.config.settings import get_settings
from assetguard.exceptions import ContractViolation
from assetguard.storage.cache import get_report_cache
from assetguard.utils.logging_config import setup_logging


# Setup logging
logger = setup_logging()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Report cache: {'enabled' if settings.cache_enabled else 'disabled'}")
    logger.info(f"Automation confidence threshold: {settings.automation_confidence_threshold}")
    yield
    logger.info(f"Shutting down {settings.app_name}...")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    description="Conflict detection and resolution engine for IT asset assignments",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ContractViolation)
async def contract_violation_handler(request: Request, exc: ContractViolation):
    logger.warning(f"Rejected {request.url.path}: {exc}")
    return JSONResponse(status_code=400, content={"detail": str(exc)})


app.include_router(api_router, prefix="/api/v1", tags=["assignments"])


@app.get("/health", tags=["health"])
def health_check(cache=Depends(get_report_cache)):
    """Health check endpoint for monitoring and load balancers."""
    if cache is None:
        cache_status = "disabled"
    else:
        cache_status = "ok" if cache.health_check() else "unreachable"
    return {"status": "ok", "app": settings.app_name, "version": "1.0.0", "cache": cache_status}
