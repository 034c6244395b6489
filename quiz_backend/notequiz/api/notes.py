import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from notequiz.api.dependencies import get_quiz_pipeline, get_store
from notequiz.api.schemas import NoteOut, QuizQuestion, QuizzesOut
from notequiz.errors import NotFoundError
from notequiz.services.quiz_pipeline import QuizPipeline
from notequiz.storage.json_store import NoteQuizJsonStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["Notes"])


@router.get(
    "/{note_id}",
    response_model=NoteOut,
    summary="Get note by id",
    description="Returns the note record, including any quizzes already generated for it.",
)
def find_note_by_id(note_id: str, store: NoteQuizJsonStore = Depends(get_store)) -> NoteOut:
    """
    Retrieve a single note.

    Raises:
        HTTPException 404 if the note is not found.
    """
    note = store.get_note(note_id)
    if note is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return NoteOut(**note)


@router.get(
    "/{note_id}/generate",
    response_model=QuizzesOut,
    summary="Generate quiz from a note",
    description=(
        "Extracts the text of the note's PDF (with OCR fallback), asks the language model for "
        "multiple-choice questions, stores them on the note and returns them."
    ),
)
async def generate_quizzes(note_id: str, pipeline: QuizPipeline = Depends(get_quiz_pipeline)) -> QuizzesOut:
    """
    Run the quiz generation pipeline for a note.

    Returns:
        QuizzesOut: The generated questions.

    Notes:
        - A missing note maps to 404; every other failure maps to a generic 500.
        - Existing quizzes on the note are replaced.
    """
    try:
        quizzes = await pipeline.process(note_id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    except Exception:
        logger.exception("Error processing PDF and generating questions for note %s", note_id)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error")
    return QuizzesOut(quizzes=quizzes)


@router.get(
    "/{note_id}/findAllQuizzes",
    response_model=List[QuizQuestion],
    summary="List quizzes of a note",
    description="Returns the quiz questions persisted on the note, in generation order.",
)
def find_all_quizzes(note_id: str, store: NoteQuizJsonStore = Depends(get_store)) -> List[QuizQuestion]:
    """
    Retrieve the quizzes stored on a note.

    Returns:
        List[QuizQuestion]: The persisted questions; empty if none were generated yet.

    Raises:
        HTTPException 404 if the note is not found.
    """
    quizzes = store.get_note_quizzes(note_id)
    if quizzes is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Note not found")
    return [QuizQuestion(**q) for q in quizzes]
