import asyncio
import os

import pytest

from notequiz.errors import ExtractionError, NotFoundError, ParseError
from notequiz.services.quiz_pipeline import QuizPipeline

from conftest import FakeGenerator


def make_pipeline(store, generator, tmp_path, extractor=None, question_count=5):
    seen = []

    def fake_extract(path, language):
        seen.append((path, language))
        return "Cells are the basic unit of life."

    pipeline = QuizPipeline(
        store=store,
        generator=generator,
        notes_root=str(tmp_path),
        question_count=question_count,
        extractor=extractor or fake_extract,
    )
    return pipeline, seen


def test_process_runs_all_stages_and_persists(store, generator, tmp_path):
    note = store.add_note({"title": "Biology", "url": "uploads/bio.pdf"})
    pipeline, seen = make_pipeline(store, generator, tmp_path)

    quizzes = asyncio.run(pipeline.process(note["id"]))

    assert len(quizzes) == 5
    assert seen == [(os.path.join(str(tmp_path), "uploads", "bio.pdf"), "eng")]
    assert generator.calls == ["Cells are the basic unit of life."]
    stored = store.get_note_quizzes(note["id"])
    assert stored == [q.model_dump(by_alias=True) for q in quizzes]


def test_process_replaces_previous_quizzes(store, generator, tmp_path):
    note = store.add_note({"url": "bio.pdf", "quizzes": [{"question": "old"}]})
    pipeline, _ = make_pipeline(store, generator, tmp_path)

    asyncio.run(pipeline.process(note["id"]))

    assert len(store.get_note_quizzes(note["id"])) == 5


def test_missing_note_raises_without_writing(store, generator, tmp_path):
    store.add_note({"url": "bio.pdf"})
    before = open(store.path, encoding="utf-8").read()
    pipeline, seen = make_pipeline(store, generator, tmp_path)

    with pytest.raises(NotFoundError):
        asyncio.run(pipeline.process("does-not-exist"))

    assert seen == []
    assert generator.calls == []
    assert open(store.path, encoding="utf-8").read() == before


def test_extraction_failure_propagates(store, generator, tmp_path):
    note = store.add_note({"url": "scan.pdf"})

    def failing_extract(path, language):
        raise ExtractionError("no text")

    pipeline, _ = make_pipeline(store, generator, tmp_path, extractor=failing_extract)

    with pytest.raises(ExtractionError):
        asyncio.run(pipeline.process(note["id"]))
    assert generator.calls == []
    assert store.get_note_quizzes(note["id"]) == []


def test_wrong_question_count_is_a_parse_error(store, tmp_path):
    note = store.add_note({"url": "bio.pdf"})
    reply = "Intro\n\n1. What is 2+2?\na) 3\nb) 4\nc) 5\nd) 6\nCorrect answer: b"
    pipeline, _ = make_pipeline(store, FakeGenerator(reply=reply), tmp_path)

    with pytest.raises(ParseError):
        asyncio.run(pipeline.process(note["id"]))
    assert store.get_note_quizzes(note["id"]) == []


def test_question_count_can_be_left_open(store, tmp_path):
    note = store.add_note({"url": "bio.pdf"})
    reply = "Intro\n\n1. What is 2+2?\na) 3\nb) 4\nc) 5\nd) 6\nCorrect answer: b"
    pipeline, _ = make_pipeline(store, FakeGenerator(reply=reply), tmp_path, question_count=None)

    quizzes = asyncio.run(pipeline.process(note["id"]))

    assert [q.question for q in quizzes] == ["What is 2+2?"]


def test_resolve_path_is_absolute(store, generator, tmp_path):
    pipeline, _ = make_pipeline(store, generator, tmp_path)

    assert pipeline.resolve_path("a/../b.pdf") == os.path.join(str(tmp_path), "b.pdf")


def test_generator_factory_is_only_called_for_existing_notes(store, generator, tmp_path):
    built = []

    def factory():
        built.append(True)
        return generator

    pipeline = QuizPipeline(store=store, generator_factory=factory, notes_root=str(tmp_path),
                            extractor=lambda path, language: "text")

    with pytest.raises(NotFoundError):
        asyncio.run(pipeline.process("missing"))
    assert built == []

    note = store.add_note({"url": "bio.pdf"})
    asyncio.run(pipeline.process(note["id"]))
    asyncio.run(pipeline.process(note["id"]))
    assert built == [True]


def test_pipeline_requires_a_generator_source(store):
    with pytest.raises(ValueError):
        QuizPipeline(store=store)
