from fastapi import FastAPI

from app.api.weather import router as weather_router
from app.config import get_settings
from app.observability.logging import configure_logging, get_logger
from app.observability.middleware import RequestContextMiddleware


def create_app() -> FastAPI:
    settings = get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        docs_url="/swagger" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/swagger/v1/swagger.json" if docs_enabled else None,
    )
    app.add_middleware(RequestContextMiddleware)
    app.include_router(weather_router)

    @app.on_event("startup")
    def _startup() -> None:
        configure_logging(get_settings())
        get_logger("app").info(
            f"Starting {settings.app_name} in {settings.environment} environment",
            docs_enabled=docs_enabled,
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
