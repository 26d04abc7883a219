"""
Diffview Backend - FastAPI Application Entry Point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import DiffViewError
from .routers import config, diff
from .services.config_manager import ConfigManager

logger = logging.getLogger(__name__)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown logic"""
    config_manager = ConfigManager.get_instance()
    setup_logging(config_manager.get("logLevel", "INFO"))
    logger.info("[Backend] Starting Diffview Backend...")
    logger.info("[Backend] ConfigManager initialized from %s", config_manager.config_file)

    yield
    logger.info("[Backend] Shutting down Diffview Backend...")


app = FastAPI(
    title="Diffview Backend",
    description="Unified and side-by-side views of working tree diffs",
    version="1.0.0",
    lifespan=lifespan,
)

# The web UI is served from a different local port during development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DiffViewError)
async def diffview_error_handler(request: Request, exc: DiffViewError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # loc starts with "query" or "body"; report only the field path
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())[1:]) or "request"
        messages.append(f"{field}: {err.get('msg', 'invalid value')}")
    return JSONResponse(status_code=400, content={"error": "; ".join(messages)})


# Include routers
app.include_router(diff.router, prefix="/api/diff", tags=["diff"])
app.include_router(config.router, prefix="/api/config", tags=["config"])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "diffview-backend"}


def run():
    import uvicorn

    server = ConfigManager.get_instance().get("server", {})
    uvicorn.run(app, host=server.get("host", "127.0.0.1"), port=int(server.get("port", 8000)))


if __name__ == "__main__":
    run()
