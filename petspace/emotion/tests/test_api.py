import threading
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from petspace.core.database import get_db
from petspace.emotion.errors import StorageError
from petspace.emotion.models import EmotionScores
from petspace.emotion.router import router

app = FastAPI()
app.include_router(router)
app.dependency_overrides[get_db] = lambda: None
client = TestClient(app)

SCORES = EmotionScores(happiness=0.5, sadness=0.1, anxiety=0.1, sleepiness=0.1, curiosity=0.2)


def _patched(engine_scores=SCORES, storage_error=None, db_error=None):
    """Patch the router's engine, storage and history collaborators."""
    engine = Mock()
    engine.analyze = AsyncMock(return_value=engine_scores)

    storage = Mock()
    storage.upload.side_effect = storage_error
    if storage_error is None:
        storage.upload.return_value = "emotions/user-1/1700000000000.png"
    storage.public_url.side_effect = lambda key: f"http://cdn.test/images/{key}"

    history = Mock()
    entry = Mock(id="rec-1", created_at=datetime(2024, 5, 1, tzinfo=timezone.utc))
    history.save = AsyncMock(return_value=entry, side_effect=db_error)

    return (
        patch("petspace.emotion.router.get_engine", return_value=engine),
        patch("petspace.emotion.router.get_storage", return_value=storage),
        patch("petspace.emotion.router.history_service", history),
    )


def test_health_endpoint():
    response = client.get("/emotion/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert set(data["providers"]) == {"google_vision", "gemini"}


def test_analyze_endpoint(png_base64):
    p_engine, p_storage, p_history = _patched()
    with p_engine as engine, p_storage as storage, p_history as history:
        response = client.post(
            "/emotion/analyze",
            json={"imageBase64": png_base64, "userId": "user-1", "petId": "pet-9", "memo": "after walk"},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["id"] == "rec-1"
    assert body["data"]["image_url"] == "http://cdn.test/images/emotions/user-1/1700000000000.png"
    assert body["data"]["emotion_analysis"] == SCORES.model_dump()
    assert body["data"]["created_at"].startswith("2024-05-01")

    image = engine.return_value.analyze.await_args.args[0]
    assert image.mime_type == "image/png"
    storage.return_value.upload.assert_called_once()
    kwargs = history.save.await_args.kwargs
    assert kwargs["user_id"] == "user-1"
    assert kwargs["pet_id"] == "pet-9"
    assert kwargs["memo"] == "after walk"
    assert kwargs["scores"] == SCORES


def test_analyze_accepts_data_url(png_base64):
    p_engine, p_storage, p_history = _patched()
    with p_engine, p_storage, p_history:
        response = client.post(
            "/emotion/analyze",
            json={"imageBase64": f"data:image/png;base64,{png_base64}", "userId": "user-1"},
        )

    assert response.status_code == 200


def test_analyze_missing_fields():
    response = client.post("/emotion/analyze", json={"userId": "user-1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields: imageBase64, userId"}

    response = client.post("/emotion/analyze", json={"imageBase64": "abc"})
    assert response.status_code == 400


def test_analyze_rejects_non_image():
    p_engine, p_storage, p_history = _patched()
    with p_engine as engine, p_storage, p_history:
        response = client.post(
            "/emotion/analyze",
            json={"imageBase64": "bm90IGFuIGltYWdl", "userId": "user-1"},
        )

    assert response.status_code == 400
    assert "error" in response.json()
    engine.return_value.analyze.assert_not_called()


def test_analyze_rejects_bad_base64():
    response = client.post("/emotion/analyze", json={"imageBase64": "%%%not-base64%%%", "userId": "u"})
    assert response.status_code == 400


def test_analyze_storage_failure(png_base64):
    p_engine, p_storage, p_history = _patched(storage_error=StorageError("disk full"))
    with p_engine as engine, p_storage, p_history:
        response = client.post("/emotion/analyze", json={"imageBase64": png_base64, "userId": "user-1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to upload image"}
    engine.return_value.analyze.assert_not_called()


def test_analyze_database_failure(png_base64):
    db_error = OperationalError("INSERT", {}, Exception("database is locked"))
    p_engine, p_storage, p_history = _patched(db_error=db_error)
    with p_engine, p_storage, p_history:
        response = client.post("/emotion/analyze", json={"imageBase64": png_base64, "userId": "user-1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to save analysis result"}


def test_analyze_uploads_off_the_event_loop(png_base64):
    threads = {}
    p_engine, p_storage, p_history = _patched()
    with p_engine as engine, p_storage as storage, p_history:

        def upload(user_id, image):
            threads["upload"] = threading.get_ident()
            return "emotions/user-1/1700000000000.png"

        async def analyze(image):
            threads["loop"] = threading.get_ident()
            return SCORES

        storage.return_value.upload.side_effect = upload
        engine.return_value.analyze.side_effect = analyze
        response = client.post("/emotion/analyze", json={"imageBase64": png_base64, "userId": "user-1"})

    assert response.status_code == 200
    assert threads["upload"] != threads["loop"]
