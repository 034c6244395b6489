from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Option labels in the order they must appear on every question.
OPTION_LABELS = ("a", "b", "c", "d")


# PUBLIC_INTERFACE
class QuizQuestion(BaseModel):
    """
    A single multiple-choice question.

    Options are an ordered mapping from label to text; the labels are exactly
    those of OPTION_LABELS, in order, and the correct answer is one of them.
    """
    model_config = ConfigDict(populate_by_name=True)

    question: str = Field(..., min_length=1, description="Question prompt text.")
    options: Dict[str, str] = Field(..., description="Ordered mapping of option label (a-d) to option text.")
    correct_answer: str = Field(..., alias="correctAnswer", description="Label of the correct option.")

    @field_validator("options")
    @classmethod
    def _check_options(cls, options: Dict[str, str]) -> Dict[str, str]:
        if tuple(options.keys()) != OPTION_LABELS:
            raise ValueError(f"options must be labeled {', '.join(OPTION_LABELS)} in order, got {', '.join(options)}")
        for label, text in options.items():
            if not text or not text.strip():
                raise ValueError(f"option {label} has no text")
        return options

    @model_validator(mode="after")
    def _check_correct_answer(self) -> "QuizQuestion":
        if self.correct_answer not in self.options:
            raise ValueError(f"correct answer {self.correct_answer!r} is not one of the option labels")
        return self


# PUBLIC_INTERFACE
class NoteOut(BaseModel):
    """A note record referencing an uploaded PDF and its generated quizzes."""
    id: str = Field(..., description="Note identifier.")
    title: Optional[str] = Field(default=None, description="Optional note title.")
    url: str = Field(..., description="Path of the note's PDF, relative to the notes root.")
    quizzes: List[QuizQuestion] = Field(default_factory=list, description="Quiz questions generated from the note.")


# PUBLIC_INTERFACE
class QuizzesOut(BaseModel):
    """Payload returned by the quiz generation endpoint."""
    quizzes: List[QuizQuestion] = Field(..., description="Freshly generated and persisted quiz questions.")


# PUBLIC_INTERFACE
class GroupIn(BaseModel):
    """Input model for creating a group."""
    name: str = Field(..., description="Group display name.")
    description: Optional[str] = Field(default=None, description="Optional group description.")
    members: List[str] = Field(default_factory=list, description="Identifiers of member users.")


# PUBLIC_INTERFACE
class GroupUpdate(BaseModel):
    """Partial update for a group; omitted fields are left unchanged."""
    name: Optional[str] = None
    description: Optional[str] = None
    members: Optional[List[str]] = None


# PUBLIC_INTERFACE
class GroupOut(BaseModel):
    """Stored group record."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Group identifier.")
    name: str = Field(..., description="Group display name.")
    description: Optional[str] = None
    members: List[str] = Field(default_factory=list)
    profile_picture: Optional[str] = Field(
        default=None, alias="profilePicture", description="Path of the uploaded profile picture, if any."
    )


# PUBLIC_INTERFACE
class DeleteOut(BaseModel):
    """Result of a delete operation."""
    deleted: bool


# PUBLIC_INTERFACE
class UploadOut(BaseModel):
    """Result of a profile picture upload."""
    message: str
    path: str
