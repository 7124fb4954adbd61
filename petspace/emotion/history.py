"""Emotion analysis history persistence."""
import logging
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Mapped, mapped_column

from petspace.core.database import Base
from petspace.emotion.models import EmotionScores

logger = logging.getLogger(__name__)


class EmotionHistory(Base):
    __tablename__ = "emotion_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    pet_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    image_url: Mapped[str] = mapped_column(String(1024))
    emotion_analysis: Mapped[dict] = mapped_column(JSON)
    memo: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class HistoryService:
    async def save(
        self,
        db: AsyncSession,
        user_id: str,
        image_url: str,
        scores: EmotionScores,
        pet_id: str | None = None,
        memo: str | None = None,
    ) -> EmotionHistory:
        """Insert one analysis record and return it with id and created_at populated."""
        entry = EmotionHistory(
            user_id=user_id,
            pet_id=pet_id,
            image_url=image_url,
            emotion_analysis=scores.model_dump(),
            memo=memo,
        )
        db.add(entry)
        try:
            await db.commit()
            await db.refresh(entry)
        except Exception:
            await db.rollback()
            raise
        logger.info(f"History saved: id={entry.id} user={user_id}")
        return entry


history_service = HistoryService()
