import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from pyquer.api.routes import auth, papers
from pyquer.clients.postgres_client import init_schema
from pyquer.clients.redis_client import create_cache
from pyquer.config import config as default_config
from pyquer.pipelines.analysis_pipeline import AnalysisPipeline, OCROptions
from pyquer.services.auth_service import TokenService
from pyquer.services.history_service import HistoryStore
from pyquer.services.provider_dispatcher import ProviderDispatcher, create_dispatcher
from pyquer.services.storage_service import FileStorage
from pyquer.services.user_service import UserStore

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")


def create_app(
    config=default_config,
    dispatcher: ProviderDispatcher = None,
    storage: FileStorage = None,
    cache=None,
    history: HistoryStore = None,
    users: UserStore = None,
    tokens: TokenService = None,
) -> FastAPI:
    """
    Build the FastAPI app. Every collaborator can be injected; anything not
    given is built from config.
    """
    app = FastAPI(
        title="PYQuer",
        description="Previous-year question paper analysis gateway",
        version="1.0.0"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    storage = storage or FileStorage(config.UPLOAD_DIR)
    history = history or HistoryStore(config.DATABASE_URL)

    app.state.storage = storage
    app.state.history = history
    app.state.users = users or UserStore(config.DATABASE_URL)
    app.state.tokens = tokens or TokenService(config.JWT_SECRET_KEY, config.JWT_ALGORITHM, config.JWT_EXPIRE_DAYS)
    app.state.pipeline = AnalysisPipeline(
        storage=storage,
        dispatcher=dispatcher or create_dispatcher(config),
        cache=cache,
        history=history,
        ocr_options=OCROptions(
            size=config.ocr_page_size,
            lang=config.OCR_LANG,
            max_workers=config.OCR_MAX_WORKERS,
            debug_dir=config.OCR_DEBUG_DIR,
        ),
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        if request.url.path != "/api/health":
            logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    app.include_router(papers.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok"}

    @app.get("/")
    async def root():
        """Root endpoint with API information"""
        return {
            "service": "PYQuer",
            "version": "1.0.0",
            "providers": [p.value for p in app.state.pipeline.dispatcher.available_providers],
            "endpoints": {
                "health": "GET /api/health",
                "upload": "POST /api/upload",
                "analyze": "POST /api/analyze",
                "providers": "POST /api/ai/{gemini|mistral|cohere}",
                "history": "GET /api/ai/history",
                "auth": "POST /api/auth/register, POST /api/auth/login, GET /api/auth/profile",
            }
        }

    return app


def create_production_app() -> FastAPI:
    """App factory used by the server: validates config and prepares backing services"""
    configure_logging(default_config.LOG_LEVEL)
    default_config.validate()
    init_schema(default_config.DATABASE_URL)
    return create_app(default_config, cache=create_cache(default_config))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_production_app(), host="0.0.0.0", port=default_config.PORT)
