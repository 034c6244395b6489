from typing import Optional


class NoteQuizError(Exception):
    """Base class for failures raised by the quiz generation pipeline."""


# PUBLIC_INTERFACE
class NotFoundError(NoteQuizError):
    """A referenced note or group does not exist."""


# PUBLIC_INTERFACE
class ExtractionError(NoteQuizError):
    """No text could be obtained from a PDF, by direct extraction or OCR."""


# PUBLIC_INTERFACE
class UpstreamError(NoteQuizError):
    """The language-model provider call failed or returned no text."""


# PUBLIC_INTERFACE
class ParseError(NoteQuizError):
    """The model response does not follow the expected quiz template."""

    def __init__(self, message: str, block: Optional[int] = None) -> None:
        if block is not None:
            message = f"question {block}: {message}"
        super().__init__(message)
        self.block = block
