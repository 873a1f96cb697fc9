from fastapi import FastAPI

from shared.error_handlers import register_error_handlers
from shared.logs import get_logger, init_logging
from shared.middleware import RequestLoggingMiddleware

from .application import new_application
from .config import Settings
from .routes import router

SERVICE_NAME = "users-service"


def create_app(settings: Settings | None = None, application=None) -> FastAPI:
    """Run with `uvicorn users_service.main:create_app --factory`."""
    settings = settings or Settings.from_env()
    init_logging(settings.log_level)
    logger = get_logger(SERVICE_NAME)

    app = FastAPI(title="Users Service")
    app.state.settings = settings
    app.state.application = application
    app.state.resources = None

    app.add_middleware(RequestLoggingMiddleware, logger=logger)
    register_error_handlers(app, logger)
    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME}

    @app.on_event("startup")
    async def startup():
        if app.state.application is None:
            app.state.application, app.state.resources = new_application(settings, logger)
        logger.info("%s started", SERVICE_NAME)

    @app.on_event("shutdown")
    async def shutdown():
        resources = app.state.resources
        if resources is None:
            return
        if resources.redis is not None:
            await resources.redis.aclose()
        await resources.engine.dispose()

    return app
