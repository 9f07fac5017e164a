"""
ASGI entry point for the recommendation service.

    uvicorn api.app:create_app --factory --reload      # local
    uvicorn api.app:app --host 0.0.0.0 --port 8080     # deployed
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from config.settings import Settings, get_settings
from core.logging import configure_logging, get_logger
from core.middleware import RequestTracingMiddleware


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Configure logging. Data files are read per request, so nothing is preloaded."""
    settings = get_settings()

    configure_logging(
        json_logs=settings.is_production,
        log_level="DEBUG" if settings.debug else "INFO",
    )

    logger.info(
        "Starting recommendation API",
        environment=settings.environment,
        port=settings.port,
        base_dir=str(settings.base_dir),
        apply_variance_mask=settings.apply_variance_mask,
    )

    yield

    logger.info("Shutting down recommendation API")


def create_app(
    include_static_files: bool = True,
) -> FastAPI:
    """Build the app: CORS, request tracing, the five routers and (optionally) /public."""
    settings = get_settings()

    app = FastAPI(
        title="Latent Preference Recommendation API",
        description="""
        Recommends catalog items by cosine similarity between image embeddings
        and a recency-weighted average of the user's latest likes.

        ## Main Endpoints

        - `/api/products` - Public catalog listing per category
        - `/api/events` - Append, list or clear interaction events
        - `/api/recommendations` - Ranked recommendations per category
        - `/api/masks/{category}` - Stored variance mask for a category

        ## Health Checks

        - `/health` - Basic health check
        - `/ready` - Readiness probe
        - `/live` - Liveness probe
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(RequestTracingMiddleware)

    from api.routes.health import router as health_router
    from api.routes.products import router as products_router
    from api.routes.events import router as events_router
    from api.routes.recommendations import router as recommendations_router
    from api.routes.masks import router as masks_router

    app.include_router(health_router)
    app.include_router(products_router)
    app.include_router(events_router)
    app.include_router(recommendations_router)
    app.include_router(masks_router)

    if include_static_files:
        _mount_static_files(app, settings)

    return app


def _mount_static_files(app: FastAPI, settings: Settings) -> None:
    """Serve product images; catalog image_path values begin with 'public/'."""
    public_path = settings.public_dir
    if public_path.exists():
        app.mount(
            f"/{settings.public_dir_name}",
            StaticFiles(directory=str(public_path)),
            name="public",
        )
        logger.info(f"Mounted static assets at /{settings.public_dir_name} from {public_path}")
    else:
        logger.warning(f"Static asset directory not found: {public_path}")


app = create_app()
