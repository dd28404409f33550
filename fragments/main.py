"""Entry point for the Fragments service."""

import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from common.constants import SERVICE_NAME, SERVICE_VERSION
from common.logging_config import setup_logging
from fragments.config import FRAGMENTS_HOST, FRAGMENTS_PORT, STORAGE_BACKEND
from fragments.exceptions import (
    FragmentsException,
    ValidationError,
    UnsupportedMediaTypeError,
    TypeImmutableError,
    FragmentNotFoundError,
    ConversionNotSupportedError,
    ConversionNotImplementedError,
    StorageError,
    InvalidCredentialsError,
)
from fragments.routes.fragment_routes import router as fragment_router
from fragments.schemas.common import HealthResponse
from fragments.service_locator import get_fragment_store

logger = setup_logging(SERVICE_NAME)

app = FastAPI(
    title="Fragments",
    description="Owner-scoped fragment store with type conversion",
    version=SERVICE_VERSION
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(
        f"Request started: {request.method} {request.url.path} [request_id={request_id}]"
    )

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Select the storage backend on application startup.
    """
    logger.info("Fragments service starting up...")
    get_fragment_store()
    logger.info(f"Storage backend ready [backend={STORAGE_BACKEND}]")


def _error_response(status_code: int, exc: Exception, code: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": code},
        headers=headers
    )


@app.exception_handler(UnsupportedMediaTypeError)
async def unsupported_media_type_handler(request: Request, exc: UnsupportedMediaTypeError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Unsupported media type error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, exc, "UNSUPPORTED_MEDIA_TYPE")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Validation error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, exc, "VALIDATION_ERROR")


@app.exception_handler(TypeImmutableError)
async def type_immutable_handler(request: Request, exc: TypeImmutableError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Type immutable error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, exc, "TYPE_IMMUTABLE")


@app.exception_handler(FragmentNotFoundError)
async def fragment_not_found_handler(request: Request, exc: FragmentNotFoundError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Fragment not found error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_404_NOT_FOUND, exc, "FRAGMENT_NOT_FOUND")


@app.exception_handler(ConversionNotSupportedError)
async def conversion_not_supported_handler(request: Request, exc: ConversionNotSupportedError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Conversion not supported error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, exc, "CONVERSION_NOT_SUPPORTED")


@app.exception_handler(ConversionNotImplementedError)
async def conversion_not_implemented_handler(request: Request, exc: ConversionNotImplementedError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Conversion not implemented error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(status.HTTP_501_NOT_IMPLEMENTED, exc, "CONVERSION_NOT_IMPLEMENTED")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Storage error: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "STORAGE_ERROR")


@app.exception_handler(InvalidCredentialsError)
async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.warning(
        f"Invalid credentials error: {exc} [request_id={request_id}] path={request.url.path}"
    )
    return _error_response(
        status.HTTP_401_UNAUTHORIZED, exc, "INVALID_CREDENTIALS",
        headers={"WWW-Authenticate": 'Basic realm="fragments"'}
    )


@app.exception_handler(FragmentsException)
async def fragments_exception_handler(request: Request, exc: FragmentsException):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.error(
        f"Fragments exception: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=True
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc, "INTERNAL_ERROR")


app.include_router(fragment_router)


@app.get("/", response_model=HealthResponse)
async def root(response: Response):
    """
    Root endpoint for health check.
    """
    response.headers["Cache-Control"] = "no-cache"
    return HealthResponse(service=SERVICE_NAME, version=SERVICE_VERSION)


@app.get("/health")
async def health_check():
    """
    Liveness check endpoint.
    Returns 200 if service is alive.
    """
    return {"status": "healthy", "service": SERVICE_NAME}


if __name__ == "__main__":
    uvicorn.run(app, host=FRAGMENTS_HOST, port=FRAGMENTS_PORT)
