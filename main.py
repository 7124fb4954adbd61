"""
FastAPI Application Entry Point.

This is the main entry point for the PetSpace backend API.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from petspace.core.config import settings
from petspace.core.database import init_db
from petspace.emotion import router as emotion
from petspace.emotion.router import router as emotion_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(name)s %(levelname)-8s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info(f"Emotion providers: {settings.provider_config().credentials}")
    yield
    await emotion.shutdown()


app = FastAPI(
    title="PetSpace API",
    description="Backend API for PetSpace - pet emotion analysis.",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include Routers
app.include_router(emotion_router)

# Uploaded photos, addressed by the public URLs stored in emotion_history
images_dir = settings.storage.root / settings.storage.bucket
images_dir.mkdir(parents=True, exist_ok=True)
app.mount("/images", StaticFiles(directory=images_dir), name="images")


@app.get("/health")
async def health():
    """Global health check."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
