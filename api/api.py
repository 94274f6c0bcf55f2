from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from api.config import SessionLocal, create_db, get_settings
from api.routes.auth_routes import auth_routes
from api.routes.progress_routes import progress_routes
from api.routes.quiz_routes import quiz_routes
from api.routes.topic_routes import topic_routes
from api.services.catalog import seed_catalog
from api.services.progress_store import ProgressStore
from api.utils.common import error_details
from api.utils.logger import clear_request_id, configure_logging, set_request_id
from lajan.errors import InvalidArgument, StorageUnavailable, UserMismatch, ValidationError

logger = configure_logging()

STORAGE_RETRY_AFTER_SECONDS = 5


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db()
    if get_settings().seed_catalog:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()
    db = SessionLocal()
    try:
        ProgressStore(db).prune_applied_events()
    finally:
        db.close()
    logger.info("startup complete")
    yield


app = FastAPI(title="Lajan Learning Progress", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_logger(request: Request, call_next):
    rid = set_request_id(request.headers.get("x-request-id"))
    try:
        logger.info("request start method=%s path=%s client=%s", request.method, request.url.path, request.client)
        response: Response = await call_next(request)
        logger.info("request end status=%s method=%s path=%s", response.status_code, request.method, request.url.path)
        response.headers["x-request-id"] = rid
        return response
    except Exception:
        logger.exception("request error method=%s path=%s", request.method, request.url.path)
        raise
    finally:
        clear_request_id()


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    # Log server-side errors with stack traces; client errors as warnings.
    if exc.status_code >= 500:
        logger.exception("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    else:
        logger.warning("http error status=%s method=%s path=%s detail=%s", exc.status_code, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("validation error method=%s path=%s errors=%s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=422, content={"detail": error_details(exc.errors())})


@app.exception_handler(ValidationError)
async def record_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning("invalid progress record method=%s path=%s errors=%s", request.method, request.url.path, exc.errors)
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": error_details(exc.errors)},
    )


@app.exception_handler(UserMismatch)
async def user_mismatch_handler(request: Request, exc: UserMismatch) -> JSONResponse:
    logger.warning("user mismatch method=%s path=%s expected=%s actual=%s", request.method, request.url.path, exc.expected, exc.actual)
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"detail": "User ID mismatch in progress data"})


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    logger.warning("invalid argument method=%s path=%s detail=%s", request.method, request.url.path, exc)
    return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(StorageUnavailable)
async def storage_unavailable_handler(request: Request, exc: StorageUnavailable) -> JSONResponse:
    logger.error("storage unavailable method=%s path=%s detail=%s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Progress could not be saved right now, it will sync later"},
        headers={"Retry-After": str(STORAGE_RETRY_AFTER_SECONDS)},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Never leak internal exception details to clients.
    logger.exception("unhandled error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


@app.get("/")
def read_root():
    return {"message": "Lajan progress service is Healthy"}


app.include_router(auth_routes, prefix="/auth")
app.include_router(progress_routes, prefix="/progress")
app.include_router(topic_routes, prefix="/topics")
app.include_router(quiz_routes, prefix="/quiz")

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
