from fastapi import FastAPI

from app.hotelport.api import api_router
from app.hotelport.core.config import settings
from app.hotelport.core.errors import setup_exception_handlers
from app.hotelport.core.logging import configure_logging
from app.hotelport.middleware.trace import TraceIdMiddleware


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(TraceIdMiddleware)
    setup_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()
