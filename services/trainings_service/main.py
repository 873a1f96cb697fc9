from fastapi import FastAPI

from shared.error_handlers import register_error_handlers
from shared.logs import get_logger, init_logging
from shared.middleware import RequestLoggingMiddleware

from .application import new_application
from .config import Settings
from .routes import router

SERVICE_NAME = "trainings-service"


def create_app(settings: Settings | None = None, application=None) -> FastAPI:
    """Run with `uvicorn trainings_service.main:create_app --factory`."""
    settings = settings or Settings.from_env()
    init_logging(settings.log_level)
    logger = get_logger(SERVICE_NAME)

    app = FastAPI(title="Trainings Service")
    app.state.settings = settings
    app.state.application = application
    app.state.resources = None

    app.add_middleware(RequestLoggingMiddleware, logger=logger)
    register_error_handlers(app, logger)
    app.include_router(router)

    @app.get("/health")
    async def health():
        resources = app.state.resources
        events_enabled = bool(resources and resources.publisher.enabled)
        return {"status": "ok", "service": SERVICE_NAME, "events_enabled": events_enabled}

    @app.on_event("startup")
    async def startup():
        if app.state.application is None:
            app.state.application, app.state.resources = new_application(settings, logger)
            try:
                await app.state.resources.publisher.connect()
            except Exception as e:
                logger.warning("RabbitMQ connect failed at startup; continuing: %s", e)
        logger.info("%s started", SERVICE_NAME)

    @app.on_event("shutdown")
    async def shutdown():
        resources = app.state.resources
        if resources is None:
            return
        await resources.publisher.close()
        if resources.redis is not None:
            await resources.redis.aclose()
        await resources.engine.dispose()

    return app
