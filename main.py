import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from shortlink_app.config import settings
from shortlink_app.database.connection import engine, Base
from shortlink_app.api.v1 import urls, redirect
from shortlink_app.errors import (
    DuplicateCodeError,
    ExpiredError,
    MaxCollisionError,
    NotFoundError,
    StoreError,
)
from shortlink_app.logging_config import setup_logging

# Import models to ensure they're registered with Base
from shortlink_app.models import URL, AnalyticsEntry

setup_logging(settings.log_level)
logger = logging.getLogger("shortlink_app.main")

# Create database tables
Base.metadata.create_all(bind=engine)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="A short-link service with expiring links and access analytics",
    debug=settings.debug
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "Short URL not found"})


@app.exception_handler(ExpiredError)
async def expired_handler(request: Request, exc: ExpiredError):
    return JSONResponse(status_code=status.HTTP_410_GONE, content={"detail": str(exc)})


@app.exception_handler(DuplicateCodeError)
async def duplicate_code_handler(request: Request, exc: DuplicateCodeError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(MaxCollisionError)
@app.exception_handler(StoreError)
async def server_error_handler(request: Request, exc: Exception):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "The server could not process your request"}
    )


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "environment": settings.environment}


######## Include routers
app.include_router(urls.router, prefix="/api/v1")
app.include_router(redirect.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.host, port=settings.port, reload=settings.debug)
