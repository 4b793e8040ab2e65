from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
import traceback

from app.core.errors import RosterError
from app.utils.log_utils import log_debug

def register_exception_handlers(app: FastAPI):
    @app.exception_handler(RosterError)
    async def roster_error_handler(request: Request, exc: RosterError):
        if exc.status_code >= 500:
            log_debug(f"{request.method} {request.url.path} failed: {exc.message}", {
                "type": type(exc).__name__,
                "cause": repr(exc.__cause__),
            }, service="errors")
            return JSONResponse(status_code=exc.status_code, content={"error": "Internal server error"})
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail}
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        log_debug(f"Unhandled error on {request.method} {request.url.path}: {exc}",
                  traceback.format_exc(), service="errors")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )
