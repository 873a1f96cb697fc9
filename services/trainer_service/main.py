from fastapi import FastAPI

from shared.error_handlers import register_error_handlers
from shared.logs import get_logger, init_logging
from shared.middleware import RequestLoggingMiddleware

from .application import new_application
from .config import Settings
from .routes import router

SERVICE_NAME = "trainer-service"


def create_app(settings: Settings | None = None, application=None) -> FastAPI:
    """
    Builds the trainer service. Run with
    `uvicorn trainer_service.main:create_app --factory`.

    Passing an application skips database wiring, which is how tests plug in
    the in-memory repository.
    """
    settings = settings or Settings.from_env()
    init_logging(settings.log_level)
    logger = get_logger(SERVICE_NAME)

    app = FastAPI(title="Trainer Service")
    app.state.settings = settings
    app.state.application = application
    app.state.engine = None

    app.add_middleware(RequestLoggingMiddleware, logger=logger)
    register_error_handlers(app, logger)
    app.include_router(router)

    @app.get("/health")
    async def health():
        return {"status": "ok", "service": SERVICE_NAME}

    @app.on_event("startup")
    async def startup():
        if app.state.application is None:
            app.state.application, app.state.engine = new_application(settings, logger)
        logger.info("%s started", SERVICE_NAME)

    @app.on_event("shutdown")
    async def shutdown():
        if app.state.engine is not None:
            await app.state.engine.dispose()

    return app
