import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .errors import InfrastructureError, SlugError


def register_error_handlers(app: FastAPI, logger: logging.Logger) -> None:
    @app.exception_handler(SlugError)
    async def slug_error_handler(request: Request, exc: SlugError):
        if isinstance(exc, InfrastructureError):
            logger.error("request failed slug=%s path=%s: %s", exc.slug, request.url.path, exc.message)
        else:
            logger.info("request rejected slug=%s path=%s: %s", exc.slug, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"slug": exc.slug, "message": exc.message},
        )
