# utils/errors.py
import logging
from typing import Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from utils.backend_client import BackendError

logger = logging.getLogger(__name__)


def upstream_error(e: BackendError, status_code: Optional[int] = None, detail: Optional[str] = None) -> HTTPException:
    """HTTPException carrying the backend's message (or a replacement)."""
    code = status_code or (e.status_code if 400 <= e.status_code < 500 else 500)
    return HTTPException(status_code=code, detail=detail or e.message)


# Every error body is {"error": "..."}
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    # Skip the "body" root and positions (e.g. the offset of a JSON decode error)
    field = ".".join(p for p in first.get("loc", ()) if isinstance(p, str) and p != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{field}: {message}" if field else message, "details": jsonable_errors(errors)},
    )


async def backend_exception_handler(request: Request, exc: BackendError) -> JSONResponse:
    logger.error(f"Unhandled backend error on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=500, content={"error": exc.message})


def jsonable_errors(errors) -> list:
    # ctx may hold exception instances that JSON cannot encode
    return [{k: v for k, v in err.items() if k in ("loc", "msg", "type")} for err in errors]
