import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from routes.analysis_route import router as analysis_router
from routes.chat_route import router as chat_router
from routes.realtime_ws import router as realtime_router
from routes.session_route import router as session_router
from services.capture.fallback_image import load_fallback_image
from services.providers.client_factory import ProviderClients
from services.realtime.session_store import SessionStore
from utils.settings import load_settings

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - settings read once from the environment
      - the provider clients (created lazily per provider)
      - the static fallback image used when no camera is available
      - the in-memory session store
    and attach them to `app.state`.
    """
    settings = load_settings()
    app.state.settings = settings

    # Missing keys do not abort start-up; affected routes answer with a configuration error.
    provider_clients = ProviderClients(settings)
    status = provider_clients.status()
    if not status["llm_configured"]:
        LOGGER.warning("%s API key not configured; chat and vision routes will fail", settings.provider_name)
    if not status["speech_configured"]:
        LOGGER.warning("OpenAI API key not configured; speech synthesis will fail")
    app.state.provider_clients = provider_clients

    app.state.fallback_image = load_fallback_image(settings.fallback_image_path)
    app.state.session_store = SessionStore()

    try:
        yield
    finally:
        await provider_clients.aclose()


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting the selected provider and which credentials are present.
        """
        clients = getattr(request.app.state, "provider_clients", None)
        status = clients.status() if clients is not None else {}
        provider = clients.settings.llm_provider if clients is not None else None
        return {"ok": True, "provider": provider, **status}

    # Register application routers
    app.include_router(analysis_router)
    app.include_router(chat_router)
    app.include_router(session_router)
    app.include_router(realtime_router)

    return app


app = create_app()
