import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import images
from core.config import get_settings
from core.database import Database
from core.storage import ObjectStore

SERVICE_NAME = "Image Gallery API"
SERVICE_VERSION = "1.0.0"

settings = get_settings()
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
log = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    database = Database.open(settings.DATABASE_URL)
    database.create_tables()
    object_store = ObjectStore.from_settings(settings)

    app.state.database = database
    app.state.object_store = object_store
    log.info("%s started (bucket %s, region %s)", SERVICE_NAME, settings.AWS_BUCKET_NAME, settings.AWS_REGION)
    try:
        yield
    finally:
        object_store.close()
        database.close()
        log.info("%s stopped", SERVICE_NAME)


app = FastAPI(
    title=SERVICE_NAME,
    description="Image metadata backed by a relational table, image bytes backed by S3",
    version=SERVICE_VERSION,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


# ==================== ERROR ENVELOPES ====================
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    problems = [
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "error": "; ".join(problems)}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": type(exc).__name__}
    )


app.include_router(images.router)


# ==================== HEALTH CHECK ====================
@app.get("/health")
def health_check():
    """Health check endpoint for Docker and Kubernetes."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION
    }


@app.get("/")
def root():
    return {
        "message": f"{SERVICE_NAME} Server",
        "endpoints": {
            "images": "/images",
            "health": "/health"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
