"""
Bank Service — FastAPI Application.

This is the entry point for the application. Routers and the
error-to-status mapping are registered here.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bank_service.config import get_settings
from bank_service.exceptions import AccountError
from bank_service.logging_config import configure_logging, get_logger
from bank_service.api.health import router as health_router
from bank_service.api.accounts import router as accounts_router

settings = get_settings()

configure_logging(settings.LOG_LEVEL, json_output=settings.LOG_JSON)
logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Accounts, deposits, withdrawals and transfers",
)


def error_body(status: int, error: str, message: str, request: Request) -> dict:
    return {
        "status": status,
        "error": error,
        "message": message,
        "path": request.url.path,
    }


# --- Error Handlers ---

@app.exception_handler(AccountError)
async def handle_account_error(request: Request, exc: AccountError):
    """Business rule violations carry their own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(
            exc.status_code, type(exc).__name__, exc.message, request
        ),
    )


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed request bodies answer 422 with one line per field."""
    errors = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    body = error_body(422, "RequestValidationError", "Request validation failed", request)
    body["errors"] = errors
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    """Anything unforeseen answers 400 with its message."""
    logger.exception("unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=400,
        content=error_body(400, type(exc).__name__, str(exc), request),
    )


# Register routers
app.include_router(health_router)
app.include_router(accounts_router)


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "bank_service.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
