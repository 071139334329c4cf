# bookstore/api/responses.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from bookstore.domain.errors import BookstoreError
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


def envelope(data=None, message: str = "Success") -> dict:
    return {"success": True, "message": message, "data": data}


def paginated(data, pagination: dict, message: str = "Success") -> dict:
    return {"success": True, "message": message, "data": data, "pagination": pagination}


def _error(status_code: int, message: str, errors: list[str] | None = None) -> JSONResponse:
    body = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(status_code=status_code, content=body)


def _field_message(error: dict) -> str:
    # drop the "body" / "query" prefix FastAPI adds to locations
    loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(loc)
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(BookstoreError)
    async def bookstore_error_handler(request: Request, exc: BookstoreError):
        return _error(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(400, "Validation failed", [_field_message(e) for e in exc.errors()])

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _error(500, "Internal server error")
