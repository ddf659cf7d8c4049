import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from homereel.config import get_settings, ensure_media_dirs
from homereel.routers import (
    stream_router,
    upload_router,
    media_router,
    subtitles_router,
    tmdb_router,
)
from homereel.services.catalog_store import CatalogStore
from homereel.utils.logging_utils import setup_logger

# Load environment variables from .env file
load_dotenv()

settings = get_settings()
logger = setup_logger(log_level=getattr(logging, settings.log_level.upper(), logging.INFO))

app = FastAPI(title="homereel", description="Self-hosted media server API")

# CORS configuration
app.add_middleware(CORSMiddleware,
    allow_origins=[settings.allowed_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(stream_router)
app.include_router(upload_router)
app.include_router(media_router)
app.include_router(subtitles_router)
app.include_router(tmdb_router)

# Uploaded videos, sidecar and extracted subtitles, addressed by file reference
app.mount("/uploads", StaticFiles(directory=settings.uploads_dir, check_dir=False), name="uploads")


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """Create media directories and open the catalog store."""
    logger.info("Starting application...")
    ensure_media_dirs(settings)
    app.state.catalog_store = CatalogStore(settings.database_path).open()


@app.on_event("shutdown")
async def shutdown_event():
    """Close the catalog store."""
    logger.info("Shutting down application...")
    store = getattr(app.state, "catalog_store", None)
    if store is not None:
        store.close()
        app.state.catalog_store = None


@app.get("/")
async def root():
    return {"message": "Media server backend running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
