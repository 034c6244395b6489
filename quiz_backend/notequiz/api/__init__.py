"""
API package initialization.

Exports shared schema models for external use.
"""

# Re-export commonly used schema models
from .schemas import QuizQuestion, NoteOut, QuizzesOut, GroupIn, GroupUpdate, GroupOut  # noqa: F401
