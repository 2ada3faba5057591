"""
Main FastAPI application.

Following Sandi Metz:
- Single Responsibility: Application setup and configuration
- Small methods: Each lifecycle stage isolated
- Clear naming: Descriptive function names
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from modelgate import __version__
from modelgate.api.errors import register_exception_handlers
from modelgate.api.middleware import RequestLoggingMiddleware, default_logging_config
from modelgate.api.routes import chat, conversations, health, metrics, providers
from modelgate.api.routes.docs import API_DESCRIPTION, TAGS_METADATA
from modelgate.config import AppConfig, config
from modelgate.services.container import ServiceContainer
from modelgate.utils.logger import get_logger, setup_logging

setup_logging(config.log_level, json_logs=config.is_production)
logger = get_logger(__name__)

ServiceFactory = Callable[[AppConfig], ServiceContainer]


class ApplicationState:
    """
    Manages application-wide state.

    Single Responsibility: Lifecycle management of shared services.
    """

    def __init__(
        self,
        settings: AppConfig,
        factory: ServiceFactory = ServiceContainer.from_config,
    ) -> None:
        self._settings = settings
        self._factory = factory
        self.services: Optional[ServiceContainer] = None

    async def startup(self) -> None:
        """Build services from configuration."""
        logger.info("Starting ModelGate", env=self._settings.app_env)
        try:
            self.services = self._factory(self._settings)
            logger.info(
                "ModelGate started successfully",
                providers=len(self.services.registry.list_all()),
                configured_keys=sorted(self._settings.api_keys()),
            )
        except Exception as e:
            logger.error("Failed to initialize ModelGate", error=str(e))
            raise

    async def shutdown(self) -> None:
        """Release outbound clients and cache timers."""
        logger.info("Shutting down ModelGate")
        if self.services is not None:
            await self.services.close()
        logger.info("ModelGate shut down successfully")


def create_application(
    settings: AppConfig = config,
    factory: ServiceFactory = ServiceContainer.from_config,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        settings: Application configuration
        factory: Builds the services at startup

    Returns:
        Configured FastAPI application instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        state = ApplicationState(settings, factory)
        await state.startup()
        app.state.app_state = state

        yield

        await state.shutdown()

    app = FastAPI(
        title=settings.app_name,
        description=API_DESCRIPTION,
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )

    # Add middleware (order matters - first added is last executed)
    app.add_middleware(RequestLoggingMiddleware, config=default_logging_config)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "Retry-After",
        ],
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["health"])
    app.include_router(providers.router, prefix="/api/v1", tags=["providers"])
    app.include_router(conversations.router, prefix="/api/v1", tags=["conversations"])
    app.include_router(chat.router, prefix="/api/v1", tags=["chat"])
    app.include_router(metrics.router, prefix="/api/v1", tags=["metrics"])

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "modelgate.main:app",
        host=config.api_host,
        port=config.api_port,
        reload=config.is_development,
    )
