"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path
from typing import Generator

# Settings are cached on first import, so point them at throwaway
# locations before the application is imported.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="patchup-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_ROOT / 'app.db'}"
os.environ["UPLOAD_DIR"] = str(_TEST_ROOT / "uploads")
os.environ["OPENAI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from PIL import Image  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from patchup.backend import models_db  # noqa: E402, F401
from patchup.backend.config import Settings, get_settings  # noqa: E402
from patchup.backend.database import Base, get_db  # noqa: E402
from patchup.backend.main import app  # noqa: E402
from patchup.backend.services.ai import get_ai_service  # noqa: E402
from patchup.backend.services.pdf_service import PDFConversionError, get_pdf_service  # noqa: E402

VALID_AI_TEXT = (
    "```json\n"
    '{"main_artist": "The Test Band", '
    '"instruments_and_backlines": ["Drum kit"], '
    '"patch_list_table": ['
    '{"channelNumber": 1, "micOrDi": "SM58", "patchName": "Kick", "commentsOrStand": "boom"}, '
    '{"channelNumber": 2, "micOrDi": "DI"}, '
    '{"channelNumber": 3, "micOrDi": "SM57", "patchName": "Snare", "commentsOrStand": "clip"}'
    "]}\n"
    "```"
)


class FakeAIService:
    """Stands in for AIService; returns fixed text or raises."""

    def __init__(self, text: str = VALID_AI_TEXT, error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[str] = []

    async def extract_patch_list(self, images, source_file: str) -> str:
        self.calls.append(source_file)
        if self.error is not None:
            raise self.error
        return self.text


class FakePDFService:
    """Stands in for PDFService; records the paths it was asked to render."""

    def __init__(self, error: PDFConversionError | None = None):
        self.error = error
        self.rendered: list[Path] = []

    def render_pages(self, path) -> list[Image.Image]:
        path = Path(path)
        assert path.exists(), "upload must exist while it is being rendered"
        self.rendered.append(path)
        if self.error is not None:
            raise self.error
        return [Image.new("RGB", (100, 100), color="white")]


@pytest.fixture
def db_session() -> Generator[Session, None, None]:
    """In-memory database session with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings with a per-test upload directory."""
    return Settings(upload_dir=tmp_path / "uploads", max_upload_bytes=10 * 1024 * 1024)


@pytest.fixture
def fake_ai() -> FakeAIService:
    return FakeAIService()


@pytest.fixture
def fake_pdf() -> FakePDFService:
    return FakePDFService()


@pytest.fixture
def client(
    db_session: Session,
    test_settings: Settings,
    fake_ai: FakeAIService,
    fake_pdf: FakePDFService,
) -> Generator[TestClient, None, None]:
    """Create a test client with external services replaced."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_ai_service] = lambda: fake_ai
    app.dependency_overrides[get_pdf_service] = lambda: fake_pdf
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sample_pdf_bytes() -> bytes:
    """
    Create a minimal valid PDF for testing.

    This is a minimal PDF structure that should be recognized as a valid PDF.
    """
    return b"""%PDF-1.4
1 0 obj
<< /Type /Catalog /Pages 2 0 R >>
endobj
2 0 obj
<< /Type /Pages /Kids [3 0 R] /Count 1 >>
endobj
3 0 obj
<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] >>
endobj
trailer
<< /Size 4 /Root 1 0 R >>
%%EOF"""


@pytest.fixture
def invalid_file_bytes() -> bytes:
    """Create invalid (non-PDF) file bytes for testing."""
    return b"This is not a PDF file"
