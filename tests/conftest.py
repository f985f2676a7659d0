import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from docextract.config import settings
from docextract.database import create_session_factory, get_db, init_db
from docextract.exceptions import ExtractionError
from docextract.extraction import get_extractor
from docextract.main import app


class FakeExtractor:
    def __init__(self, text="hello text", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def extract(self, stream, content_type):
        self.calls.append((stream.read(), content_type))
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def SessionLocal(engine):
    return create_session_factory(engine)


@pytest.fixture
def db(SessionLocal):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOADS_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def failing_extractor():
    return FakeExtractor(error=ExtractionError("Text extraction failed: connection refused"))


@pytest.fixture
def make_client(SessionLocal, uploads_dir):
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    def _make(extractor=None):
        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_extractor] = lambda: extractor or FakeExtractor()
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, extractor):
    return make_client(extractor)
