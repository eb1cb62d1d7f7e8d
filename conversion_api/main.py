from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import conversion
from .services.rates.cache_service import CurrencyRateCache, build_rate_cache

ROOT_MESSAGE = "API de Conversión de Unidades funcionando correctamente"


def create_app(
    settings_override: Settings | None = None,
    rate_cache: CurrencyRateCache | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    rate_cache: inject a cache (e.g. with a fake provider); otherwise one is
    built from settings. It lives on app.state for the process lifetime.
    """
    settings = settings_override or get_settings()
    # Initialize logging early
    init_logging(debug=settings.debug)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.rate_cache = rate_cache or build_rate_cache(settings)

    # Middleware (request id / structured logging, CORS)
    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(errors.ConversionError, errors.conversion_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(conversion.router)

    @app.get("/")
    async def root():
        return {"message": ROOT_MESSAGE}

    return app


app = create_app()
