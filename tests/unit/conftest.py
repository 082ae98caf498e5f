"""Pytest fixtures for pipeline and API unit tests."""

import json
import os
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

# Unit tests never touch a real database or a real secret
os.environ["DATABASE_URL"] = ""
os.environ.setdefault("JWT_SECRET", "test-secret-for-unit-tests")

from masal.api.auth.tokens import create_access_token  # noqa: E402
from masal.api.database.repository import StoryRepository  # noqa: E402
from masal.api.dependencies import get_repository, get_story_service  # noqa: E402
from masal.api.main import app  # noqa: E402
from masal.api.services.story_service import StoryService  # noqa: E402
from masal.core.programs.story_generator import StoryGenerator  # noqa: E402


# 99 words, 16 sentences, dialogue, no blocked terms
STORY_CONTENT = (
    "Bir varmış bir yokmuş, Ahmet adında neşeli bir çocuk varmış. "
    "Ahmet her sabah bahçede köpeği Pamuk ile oynarmış. "
    "Bir gün ormanın kenarında renkli bir kelebek görmüş. "
    '"Merhaba küçük kelebek!" demiş Ahmet gülümseyerek. '
    "Kelebek hafifçe süzülerek çiçeklerin üstüne konmuş. "
    "Ahmet ve Pamuk kelebeğin peşinden yürümüşler. "
    "Yolda yaşlı bir kaplumbağa ile tanışmışlar. "
    "Kaplumbağa onlara ormanın en güzel göletini göstermiş. "
    "Göletin suyu pırıl pırıl parlıyormuş. "
    "Ahmet suya bakınca kendi gülen yüzünü görmüş. "
    '"Bu orman çok güzel!" diye sevinmiş. '
    "Akşam olunca eve dönmüşler ve annesine bu günü anlatmışlar. "
    "Annesi de onunla birlikte gülmüş. "
    "O gece Ahmet yeni dostlarını düşünerek tatlı bir uykuya dalmış."
)


@pytest.fixture
def story_content():
    """A short, safe, well-formed Turkish story."""
    return STORY_CONTENT


@pytest.fixture
def story_payload(story_content):
    """The JSON object a well-behaved model returns for a short animals story."""
    return {
        "title": "Ahmet ve Renkli Kelebek",
        "content": story_content,
        "wordCount": 99,
        "theme": "animals",
        "language": "tr",
    }


@pytest.fixture
def story_json(story_payload):
    return json.dumps(story_payload, ensure_ascii=False)


@pytest.fixture
def unsafe_story_json(story_payload):
    """Otherwise valid reply whose content contains a blocked term."""
    payload = dict(story_payload)
    payload["content"] = story_payload["content"] + " Sonra iki çocuk kavga etmiş."
    return json.dumps(payload, ensure_ascii=False)


@pytest.fixture
def story_request_body():
    """A valid POST /api/story body."""
    return {"childName": "Ahmet", "age": 6, "theme": "animals", "length": "short", "elements": ["kelebek"]}


@pytest.fixture
def mock_repository():
    """Create a mock repository for unit tests."""
    repo = AsyncMock(spec=StoryRepository)
    repo.count_recent_stories.return_value = 0
    return repo


@pytest.fixture
def mock_generator():
    """Create a mock retry orchestrator for unit tests."""
    return MagicMock(spec=StoryGenerator)


@pytest.fixture
def auth_headers():
    """Bearer header for user-123."""
    token = create_access_token(user_id="user-123", email="user@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client_with_mocks(mock_repository, mock_generator):
    """TestClient with a real StoryService over mocked collaborators."""
    app.dependency_overrides[get_repository] = lambda: mock_repository
    app.dependency_overrides[get_story_service] = lambda: StoryService(mock_repository, mock_generator)

    with TestClient(app) as client:
        yield client, mock_repository, mock_generator

    app.dependency_overrides.clear()
