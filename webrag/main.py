from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from webrag.api.routes import rag
from webrag.config import settings
from webrag.services.logger import configure_logging, log_event

API_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    log_event(
        "api_startup",
        f"webrag API {API_VERSION} ready",
        search_engine=settings.search_engine,
        ollama_model=settings.ollama_model,
        ollama_base_url=settings.ollama_base_url,
    )
    yield
    log_event("api_shutdown", "webrag API stopped")


app = FastAPI(
    title="webrag",
    description="Retrieval-augmented answers backed by planned web search",
    version=API_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type"],
)

app.include_router(rag.router)


@app.get("/api/health")
async def health():
    """Liveness only; `/api/diagnose` checks the model server."""
    return {
        "status": "ok",
        "service": "webrag",
        "version": API_VERSION,
        "search_engine": settings.search_engine,
        "ollama_model": settings.ollama_model,
    }
