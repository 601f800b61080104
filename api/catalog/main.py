from fastapi import FastAPI, Request, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
import logging
import time
import traceback
import uuid
from datetime import datetime

from .config.settings import (
    API_TITLE, API_VERSION, API_DESCRIPTION,
    CORS_ORIGINS, IS_PRODUCTION, LOCAL_STORAGE_DIR
)
from .config.database import init_db
from .core.exceptions import CatalogError, NotFoundError, StorageError, ValidationError
from .routers import contact, dashboard, downloads, health, programs, resources
from .utils.s3_utils import LocalObjectStore, get_object_store

logger = logging.getLogger(__name__)

app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    description=API_DESCRIPTION,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


@app.middleware("http")
async def process_time_header(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    response.headers["X-Process-Time"] = f"{time.perf_counter() - started:.4f}"
    return response


_ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    StorageError: 502,
}


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    """Map the catalog error taxonomy onto HTTP responses"""
    status_code = next(
        (code for error_type, code in _ERROR_STATUS.items() if isinstance(exc, error_type)),
        500
    )
    log = logger.error if status_code >= 500 else logger.info
    log(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code, "details": exc.details}
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last resort: the request fails with 500, the process keeps serving"""
    error_id = f"ERR-{uuid.uuid4().hex[:12]}"
    logger.error(
        f"{error_id}: unhandled {type(exc).__name__} on {request.method} {request.url.path}: {str(exc)}\n"
        f"{traceback.format_exc()}"
    )
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error" if IS_PRODUCTION else str(exc),
            "code": "INTERNAL_ERROR",
            "error_id": error_id,
        }
    )


for module in (programs, resources, downloads, dashboard, contact, health):
    app.include_router(module.router)

# Without S3 the uploads live on local disk and are served from here
if isinstance(get_object_store(), LocalObjectStore):
    app.mount("/files", StaticFiles(directory=LOCAL_STORAGE_DIR, check_dir=False), name="files")


@app.get("/")
async def root():
    return {"service": API_TITLE, "version": API_VERSION, "docs": "/docs"}


@app.on_event("startup")
async def startup_event():
    init_db()
    logger.info(f"{API_TITLE} {API_VERSION} started at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"{API_TITLE} shutting down")
