from functools import lru_cache
from typing import Callable

from fastapi import Depends

from notequiz.config import Settings, get_settings
from notequiz.services.question_generator import QuestionGenerator
from notequiz.services.quiz_pipeline import QuizPipeline
from notequiz.storage.json_store import NoteQuizJsonStore


# PUBLIC_INTERFACE
def get_store() -> NoteQuizJsonStore:
    """Return a cached singleton instance of the JSON store."""
    return _get_store_singleton()


@lru_cache(maxsize=1)
def _get_store_singleton() -> NoteQuizJsonStore:
    """Internal cached constructor for the store, using the configured data file."""
    return NoteQuizJsonStore(path=get_settings().data_file)


# PUBLIC_INTERFACE
def get_question_generator() -> QuestionGenerator:
    """Return the process-wide question generator and its Anthropic client."""
    return _get_generator_singleton()


@lru_cache(maxsize=1)
def _get_generator_singleton() -> QuestionGenerator:
    return QuestionGenerator.from_settings(get_settings())


# PUBLIC_INTERFACE
def get_question_generator_factory() -> Callable[[], QuestionGenerator]:
    """
    Return a callable that builds the question generator.

    The pipeline calls it only after the note lookup succeeds, so a missing
    API key cannot mask a missing note.
    """
    return get_question_generator


# PUBLIC_INTERFACE
def get_quiz_pipeline(
    store: NoteQuizJsonStore = Depends(get_store),
    generator_factory: Callable[[], QuestionGenerator] = Depends(get_question_generator_factory),
    settings: Settings = Depends(get_settings),
) -> QuizPipeline:
    """Assemble the quiz pipeline for a request."""
    return QuizPipeline(
        store=store,
        generator_factory=generator_factory,
        notes_root=settings.notes_root,
        question_count=settings.question_count,
        ocr_language=settings.ocr_language,
    )
