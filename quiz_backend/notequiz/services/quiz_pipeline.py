import logging
import os
from typing import Callable, List, Optional

from fastapi.concurrency import run_in_threadpool

from notequiz.api.schemas import QuizQuestion
from notequiz.errors import NotFoundError
from notequiz.services.question_generator import QuestionGenerator
from notequiz.services.response_parser import parse_quiz_response
from notequiz.services.text_extractor import extract_text
from notequiz.storage.json_store import NoteQuizJsonStore

logger = logging.getLogger(__name__)


class QuizPipeline:
    """
    Turns a note's PDF into persisted quiz questions.

    Stages run one after another: load note, resolve its file, extract text,
    generate, parse, persist. Nothing is retried and a failure in any stage
    leaves the stored note untouched, except when the final write itself fails.
    """

    # PUBLIC_INTERFACE
    def __init__(
        self,
        store: NoteQuizJsonStore,
        generator: Optional[QuestionGenerator] = None,
        notes_root: Optional[str] = None,
        question_count: Optional[int] = 5,
        extractor: Optional[Callable[..., str]] = None,
        ocr_language: str = "eng",
        generator_factory: Optional[Callable[[], QuestionGenerator]] = None,
    ) -> None:
        self.store = store
        self.generator = generator
        self.notes_root = notes_root or os.getcwd()
        self.question_count = question_count
        self.extractor = extractor or extract_text
        self.ocr_language = ocr_language
        self.generator_factory = generator_factory
        if generator is None and generator_factory is None:
            raise ValueError("a generator or a generator_factory is required")

    # PUBLIC_INTERFACE
    def resolve_path(self, url: str) -> str:
        """Resolve a note's stored path against the notes root."""
        return os.path.abspath(os.path.join(self.notes_root, url))

    # PUBLIC_INTERFACE
    def get_generator(self) -> QuestionGenerator:
        """Return the question generator, building it from the factory on first use."""
        if self.generator is None:
            self.generator = self.generator_factory()
        return self.generator

    # PUBLIC_INTERFACE
    async def process(self, note_id: str) -> List[QuizQuestion]:
        """
        Generate quiz questions for a note and attach them to it.

        Returns:
            list[QuizQuestion]: The parsed questions, as persisted.

        Raises:
            NotFoundError: No note has this identifier.
            OSError, ExtractionError, UpstreamError, ParseError: from the
                corresponding stage, unrecovered.
        """
        note = await run_in_threadpool(self.store.get_note, note_id)
        if note is None:
            raise NotFoundError(f"note {note_id} not found")

        # Built only once the note is known to exist
        generator = self.get_generator()

        pdf_path = self.resolve_path(note["url"])
        logger.info("Generating quiz for note %s from %s", note_id, pdf_path)

        content = await run_in_threadpool(self.extractor, pdf_path, self.ocr_language)
        logger.debug("Extracted %d characters from %s", len(content), pdf_path)

        raw = await generator.generate(content)
        quizzes = parse_quiz_response(raw, expected_count=self.question_count)

        serialized = [q.model_dump(by_alias=True) for q in quizzes]
        updated = await run_in_threadpool(self.store.set_note_quizzes, note_id, serialized)
        if updated is None:
            # Deleted between lookup and write
            raise NotFoundError(f"note {note_id} not found")

        logger.info("Stored %d quiz questions on note %s", len(quizzes), note_id)
        return quizzes
