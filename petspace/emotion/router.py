"""Emotion API Router."""
import logging

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from petspace.core.config import settings
from petspace.core.database import get_db
from petspace.emotion.engine import EmotionEngine
from petspace.emotion.errors import InvalidImageError, StorageError
from petspace.emotion.history import history_service
from petspace.emotion.image import decode_base64_image
from petspace.emotion.models import AnalysisData, AnalyzeRequest, AnalyzeResponse, HealthResponse
from petspace.emotion.storage import LocalImageStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/emotion", tags=["Emotion"])

# Singletons
_client: httpx.AsyncClient | None = None
_engine: EmotionEngine | None = None
_storage: LocalImageStorage | None = None


def get_engine() -> EmotionEngine:
    global _client, _engine
    if _engine is None:
        _client = _client or httpx.AsyncClient(timeout=settings.REQUEST_TIMEOUT_SECONDS)
        _engine = EmotionEngine.from_config(settings.provider_config(), _client)
    return _engine


def get_storage() -> LocalImageStorage:
    global _storage
    _storage = _storage or LocalImageStorage(
        root=settings.storage.root,
        public_base_url=settings.storage.public_base_url,
        bucket=settings.storage.bucket,
    )
    return _storage


async def shutdown() -> None:
    """Close the shared HTTP client."""
    global _client, _engine
    if _client is not None:
        await _client.aclose()
    _client = None
    _engine = None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(status="ok", service="Emotion", providers=settings.provider_config().credentials)


@router.post("/analyze", response_model=AnalyzeResponse)
async def analyze(request: AnalyzeRequest, db: AsyncSession = Depends(get_db)):
    if not request.image_base64 or not request.user_id:
        return error_response(400, "Missing required fields: imageBase64, userId")

    try:
        image = decode_base64_image(request.image_base64)
    except InvalidImageError as e:
        logger.info(f"Rejected image from user {request.user_id}: {e}")
        return error_response(400, str(e))

    storage = get_storage()
    try:
        key = await run_in_threadpool(storage.upload, request.user_id, image)
    except StorageError:
        logger.exception("Storage upload error")
        return error_response(500, "Failed to upload image")
    image_url = storage.public_url(key)

    try:
        scores = await get_engine().analyze(image)
    except Exception:
        logger.exception("Error in analyze-emotion")
        return error_response(500, "Internal server error")

    try:
        entry = await history_service.save(
            db,
            user_id=request.user_id,
            image_url=image_url,
            scores=scores,
            pet_id=request.pet_id,
            memo=request.memo,
        )
    except SQLAlchemyError:
        logger.exception("Database insert error")
        return error_response(500, "Failed to save analysis result")

    return AnalyzeResponse(
        data=AnalysisData(
            id=entry.id,
            emotion_analysis=scores,
            image_url=image_url,
            created_at=entry.created_at,
        )
    )
