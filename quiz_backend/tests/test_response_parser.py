import pytest

from notequiz.errors import ParseError
from notequiz.services.response_parser import parse_quiz_response

from conftest import FIVE_QUESTION_RESPONSE


SINGLE_QUESTION = """Preamble line

1. What is 2+2?
a) 3
b) 4
c) 5
d) 6
Correct answer: b"""


def test_single_question_scenario():
    quizzes = parse_quiz_response(SINGLE_QUESTION)

    assert len(quizzes) == 1
    quiz = quizzes[0]
    assert quiz.question == "What is 2+2?"
    assert quiz.options == {"a": "3", "b": "4", "c": "5", "d": "6"}
    assert quiz.correct_answer == "b"


def test_five_question_template():
    quizzes = parse_quiz_response(FIVE_QUESTION_RESPONSE, expected_count=5)

    assert len(quizzes) == 5
    for quiz in quizzes:
        assert list(quiz.options) == ["a", "b", "c", "d"]
        assert quiz.correct_answer in quiz.options


def test_order_is_preserved():
    quizzes = parse_quiz_response(FIVE_QUESTION_RESPONSE)

    assert [q.question for q in quizzes] == [
        "What organelle produces most of a cell's ATP?",
        "Which molecule carries genetic information?",
        "Where does photosynthesis take place?",
        "What surrounds every animal cell?",
        "Which structure synthesizes proteins?",
    ]
    assert [q.correct_answer for q in quizzes] == ["b", "a", "c", "d", "a"]


def test_serializes_with_camel_case_answer_key():
    quiz = parse_quiz_response(SINGLE_QUESTION)[0]

    assert quiz.model_dump(by_alias=True) == {
        "question": "What is 2+2?",
        "options": {"a": "3", "b": "4", "c": "5", "d": "6"},
        "correctAnswer": "b",
    }


def test_response_without_preamble_keeps_first_question():
    raw = SINGLE_QUESTION.split("\n\n", 1)[1]

    quizzes = parse_quiz_response(raw)

    assert len(quizzes) == 1
    assert quizzes[0].question == "What is 2+2?"


def test_tolerates_crlf_indentation_and_answer_decoration():
    raw = (
        "Sure!\r\n   \r\n"
        "    1. What is 2+2?\r\n"
        "    a) 3\r\n    b) 4\r\n    c) 5\r\n    d) 6\r\n"
        "    Correct Answer: [B]\r\n"
    )

    quiz = parse_quiz_response(raw)[0]

    assert quiz.options["d"] == "6"
    assert quiz.correct_answer == "b"


def test_option_text_keeps_later_parentheses():
    raw = SINGLE_QUESTION.replace("d) 6", "d) 6 (six) or more")

    quiz = parse_quiz_response(raw)[0]

    assert quiz.options["d"] == "6 (six) or more"


def test_unexpected_question_count_raises():
    with pytest.raises(ParseError, match="expected 5 questions, got 1"):
        parse_quiz_response(SINGLE_QUESTION, expected_count=5)


def test_correct_answer_must_be_an_option():
    raw = SINGLE_QUESTION.replace("Correct answer: b", "Correct answer: e")

    with pytest.raises(ParseError) as excinfo:
        parse_quiz_response(raw)

    assert excinfo.value.block == 1


def test_missing_answer_line_raises():
    raw = SINGLE_QUESTION.replace("Correct answer: b", "e) 7")

    with pytest.raises(ParseError, match="Correct answer"):
        parse_quiz_response(raw)


def test_wrong_number_of_options_raises():
    raw = SINGLE_QUESTION.replace("d) 6\n", "")

    with pytest.raises(ParseError, match="expected 4 options, got 3"):
        parse_quiz_response(raw)


def test_unknown_option_labels_raise():
    raw = SINGLE_QUESTION.replace("a) 3", "e) 3")

    with pytest.raises(ParseError):
        parse_quiz_response(raw)


def test_option_line_without_separator_raises():
    raw = SINGLE_QUESTION.replace("c) 5", "c: 5")

    with pytest.raises(ParseError, match="not of the form"):
        parse_quiz_response(raw)


def test_second_block_error_reports_its_index():
    raw = SINGLE_QUESTION + "\n\n2. Broken question\nCorrect answer: a"

    with pytest.raises(ParseError) as excinfo:
        parse_quiz_response(raw)

    assert excinfo.value.block == 2


@pytest.mark.parametrize("raw", ["", "   \n\n  ", "I cannot help with that."])
def test_no_questions_raises(raw):
    with pytest.raises(ParseError, match="no questions"):
        parse_quiz_response(raw)


@pytest.mark.parametrize("answer", ["b", "B", "b.", "B.", "(b)", "(b).", "[B]", "b)", "b) 4", "b: 4"])
def test_decorated_answer_labels_are_accepted(answer):
    raw = SINGLE_QUESTION.replace("Correct answer: b", f"Correct answer: {answer}")

    assert parse_quiz_response(raw)[0].correct_answer == "b"


def test_answer_given_as_option_text_raises():
    raw = SINGLE_QUESTION.replace("Correct answer: b", "Correct answer: Four")

    with pytest.raises(ParseError):
        parse_quiz_response(raw)
