import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.cors import CORSMiddleware

from edublog.api import auth_api, post_api
from edublog.auth.auth_handler import TokenService
from edublog.configs.database import init_db, make_engine
from edublog.configs.logging_config import configure_logging
from edublog.configs.settings import Settings, get_settings
from edublog.utils.responses import EnvelopeRoute, register_exception_handlers

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    # Settings() raises here when DATABASE_URL or JWT_SECRET is missing
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    engine = make_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        yield
        engine.dispose()

    app = FastAPI(
        title="Educational Blog API",
        description="Educational blogging API with JWT authentication and role-based permissions",
        version="1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.token_service = TokenService(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,  # Allowed origins
        allow_credentials=True,  # Allow cookies/auth headers
        allow_methods=["*"],  # Allow all HTTP methods
        allow_headers=["*"],  # Allow all headers
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        method, path = request.method, request.url.path
        logger.info(f"Incoming: {method} {path}")
        start = time.perf_counter()
        response = await call_next(request)
        duration = int((time.perf_counter() - start) * 1000)
        level = logging.ERROR if response.status_code >= 500 else (
            logging.WARNING if response.status_code >= 400 else logging.INFO)
        logger.log(level, f"Completed: {method} {path} {response.status_code} - {duration}ms")
        return response

    register_exception_handlers(app)

    # Include routers
    app.include_router(auth_api.router)
    app.include_router(post_api.router)
    app.router.route_class = EnvelopeRoute

    @app.get("/")
    def read_root():
        return {"message": "Educational Blog API is running"}

    @app.get("/db-status")
    def database_status():
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.error(f"Database health check failed: {e}")
            return {"status": "unhealthy", "database": "disconnected"}
        return {"status": "healthy", "database": "connected"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)
