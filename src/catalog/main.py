from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import text

from catalog.cache import ResponseCache
from catalog.db.session import shutdown
from catalog.dependencies import DB
from catalog.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from catalog.logging import get_logger
from catalog.middleware import RequestIDMiddleware
from catalog.routers.product import router as product_router
from catalog.schemas.error import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan context manager: code after yield runs on shutdown."""
    yield
    await shutdown()


app = FastAPI(lifespan=lifespan)
app.add_middleware(RequestIDMiddleware)
app.include_router(product_router)

# Process-wide response cache; tests replace it per test case.
app.state.response_cache = ResponseCache()


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """Return 404 with the entity details."""
    return JSONResponse(status_code=404, content=ErrorResponse.body("not_found", exc.message))


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Return 400 for malformed identifiers and missing required fields."""
    logger.warning("validation_error", error=exc.message, path=request.url.path)
    return JSONResponse(
        status_code=400, content=ErrorResponse.body("validation_error", exc.message)
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 400 when a request body doesn't match its schema."""
    errors = exc.errors()
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'][1:]) or 'body'}: {error['msg']}"
        for error in errors
    )
    logger.warning("validation_error", error=message, path=request.url.path)
    return JSONResponse(status_code=400, content=ErrorResponse.body("validation_error", message))


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """Return 409 when a write collides with existing data."""
    logger.warning("conflict", error=exc.message, path=request.url.path)
    return JSONResponse(status_code=409, content=ErrorResponse.body("conflict", exc.message))


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Return 400 for generic domain-level violations."""
    logger.warning("domain_error", error=exc.message, path=request.url.path)
    return JSONResponse(status_code=400, content=ErrorResponse.body("domain_error", exc.message))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unhandled exceptions and return a safe error response.

    - Logs full exception with traceback (includes request_id from context)
    - Returns generic error to client (no stack traces leaked)
    """
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse.body("internal_error", "Internal server error"),
    )


@app.get("/health")
async def health(db: DB) -> dict[str, str]:
    """Health check endpoint: verifies database connectivity."""
    await db.execute(text("SELECT 1"))
    return {"status": "ok"}
