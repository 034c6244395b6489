import pytest
from fastapi.testclient import TestClient

from notequiz.api.dependencies import get_question_generator_factory, get_store
from notequiz.api.main import app
from notequiz.config import Settings, get_settings
from notequiz.services import quiz_pipeline
from notequiz.storage.json_store import NoteQuizJsonStore


FIVE_QUESTION_RESPONSE = """Here are 5 multiple-choice questions based on the content:

1. What organelle produces most of a cell's ATP?
a) Nucleus
b) Mitochondrion
c) Ribosome
d) Golgi apparatus
Correct answer: b

2. Which molecule carries genetic information?
a) DNA
b) ATP
c) Glucose
d) Cholesterol
Correct answer: a

3. Where does photosynthesis take place?
a) Vacuole
b) Lysosome
c) Chloroplast
d) Centrosome
Correct answer: c

4. What surrounds every animal cell?
a) Cell wall
b) Capsule
c) Cuticle
d) Plasma membrane
Correct answer: d

5. Which structure synthesizes proteins?
a) Ribosome
b) Peroxisome
c) Nucleolus
d) Vesicle
Correct answer: a"""


class FakeGenerator:
    """Stands in for QuestionGenerator; returns a canned reply or raises."""

    def __init__(self, reply=FIVE_QUESTION_RESPONSE, error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def generate(self, content):
        self.calls.append(content)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def store(tmp_path):
    return NoteQuizJsonStore(path=str(tmp_path / "data" / "notequiz.json"))


@pytest.fixture
def settings(tmp_path):
    return Settings(
        anthropic_api_key="test-key",
        data_file=str(tmp_path / "data" / "notequiz.json"),
        notes_root=str(tmp_path),
        uploads_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def extracted(monkeypatch):
    """Replace PDF extraction with a stub; records the resolved paths it was given."""
    paths = []

    def fake_extract(path, language="eng"):
        paths.append(path)
        return "Cells are the basic unit of life."

    monkeypatch.setattr(quiz_pipeline, "extract_text", fake_extract)
    return paths


@pytest.fixture
def client(store, settings, generator):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_question_generator_factory] = lambda: (lambda: generator)
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
