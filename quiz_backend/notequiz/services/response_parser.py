"""
Parser for the plain-text quiz template returned by the language model.

Expected shape, one block per question, blocks separated by blank lines and
usually preceded by a one-block preamble:

    1. Question text
    a) Option 1
    b) Option 2
    c) Option 3
    d) Option 4
    Correct answer: b

Anything that does not fit raises ParseError; no partial records are produced.
"""

import re
from typing import Dict, List, Optional

from pydantic import ValidationError

from notequiz.api.schemas import OPTION_LABELS, QuizQuestion
from notequiz.errors import ParseError

_BLANK_LINE_REGEX = re.compile(r"\n[ \t]*\n")
_NUMBER_PREFIX_REGEX = re.compile(r"^\d+\s*[.)]\s*")
_ANSWER_REGEX = re.compile(r"^correct\s+answer\s*:\s*(.*)$", re.IGNORECASE)
_ANSWER_LABEL_REGEX = re.compile(r"^[\[(]?\s*([a-z])\s*[\])]?(?:[.):]|\s|$)")


def _split_blocks(raw: str) -> List[List[str]]:
    """Split text into blocks of trimmed, non-empty lines."""
    text = raw.replace("\r\n", "\n").replace("\r", "\n").strip()
    blocks = []
    for chunk in _BLANK_LINE_REGEX.split(text):
        lines = [line.strip() for line in chunk.split("\n") if line.strip()]
        if lines:
            blocks.append(lines)
    return blocks


def _parse_option(line: str, index: int) -> tuple:
    label, sep, text = line.partition(") ")
    if not sep:
        raise ParseError(f"option line {line!r} is not of the form 'x) text'", index)
    return label.strip().lower(), text.strip()


def _parse_answer(line: str, index: int) -> str:
    match = _ANSWER_REGEX.match(line)
    if not match:
        raise ParseError(f"last line {line!r} is not a 'Correct answer:' declaration", index)
    answer = match.group(1).strip()
    if not answer:
        raise ParseError("correct answer is empty", index)
    # Models sometimes answer "[b]", "(b)", "b.", "b)" or "b) 4"
    label = _ANSWER_LABEL_REGEX.match(answer.lower())
    return label.group(1) if label else answer.lower()


def _parse_block(lines: List[str], index: int) -> QuizQuestion:
    if len(lines) < 3:
        raise ParseError(f"expected a question, options and an answer line, got {len(lines)} line(s)", index)

    question = _NUMBER_PREFIX_REGEX.sub("", lines[0], count=1).strip()
    if not question:
        raise ParseError("question text is empty", index)

    options: Dict[str, str] = {}
    for line in lines[1:-1]:
        label, text = _parse_option(line, index)
        if label in options:
            raise ParseError(f"duplicate option label {label!r}", index)
        options[label] = text
    if len(options) != len(OPTION_LABELS):
        raise ParseError(f"expected {len(OPTION_LABELS)} options, got {len(options)}", index)

    answer = _parse_answer(lines[-1], index)

    try:
        return QuizQuestion(question=question, options=options, correct_answer=answer)
    except ValidationError as exc:
        messages = "; ".join(err["msg"] for err in exc.errors())
        raise ParseError(messages, index) from exc


# PUBLIC_INTERFACE
def parse_quiz_response(raw: str, expected_count: Optional[int] = None) -> List[QuizQuestion]:
    """
    Parse a model reply into quiz questions.

    The first block is treated as a preamble and dropped unless it already
    starts with a numbered question. The remaining blocks map one-to-one, in
    order, to the returned questions.

    Args:
        raw: Text returned by the model.
        expected_count: If given, the exact number of questions required.

    Returns:
        list[QuizQuestion]: Parsed questions in input order.

    Raises:
        ParseError: The text does not follow the template.
    """
    blocks = _split_blocks(raw or "")
    if blocks and not _NUMBER_PREFIX_REGEX.match(blocks[0][0]):
        blocks = blocks[1:]
    if not blocks:
        raise ParseError("response contains no questions")

    questions = [_parse_block(lines, index) for index, lines in enumerate(blocks, start=1)]

    if expected_count is not None and len(questions) != expected_count:
        raise ParseError(f"expected {expected_count} questions, got {len(questions)}")
    return questions
