"""
Request validation for quiz authoring and submission.

Payloads are parsed into plain dataclasses before anything touches the
database. Anything malformed raises ``InvalidInput``; values are never
coerced silently (``True`` is not an option index, ``"3"`` is not a number).
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from eventquiz.quiz.errors import InvalidInput
from eventquiz.quiz.models import (
    MAX_TIME_LIMIT_SECONDS,
    MIN_TIME_LIMIT_SECONDS,
    OPTIONS_PER_QUESTION,
    UNANSWERED,
)

MAX_TITLE_LENGTH = 200
MAX_QUESTIONS_PER_QUIZ = 200
MAX_URL_LENGTH = 500
MAX_TIME_TAKEN_SECONDS = 86400
ANSWER_FIELDS = frozenset({'question_index', 'selected_option', 'time_taken'})


@dataclass
class QuestionInput:
    question_text: str
    options: list[str]
    correct_answer: int
    time_limit_seconds: int
    image_ref: Optional[str] = None


@dataclass
class QuizInput:
    title: str
    questions: list[QuestionInput]
    feedback_link: Optional[str] = None
    linked_event_id: Optional[int] = None
    available_from: Optional[datetime] = None
    available_until: Optional[datetime] = None


@dataclass(frozen=True)
class AnswerInput:
    question_index: int
    selected_option: int = UNANSWERED
    time_taken: int = 0


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _optional_text(value: Any, field_name: str, max_length: int) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInput(f"{field_name} must be a string")
    value = value.strip()
    if len(value) > max_length:
        raise InvalidInput(f"{field_name} must be at most {max_length} characters")
    return value or None


def parse_timestamp(value: Any, field_name: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp into naive UTC.

    ``None`` and the empty string mean "unbounded". Offsets are converted to
    UTC; naive values are taken to be UTC already.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidInput(f"{field_name} must be an ISO 8601 timestamp")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidInput(f"{field_name} is not a valid timestamp") from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def validate_feedback_link(value: Any) -> Optional[str]:
    link = _optional_text(value, "feedback_link", MAX_URL_LENGTH)
    if link is None:
        return None
    parsed = urlparse(link)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInput("feedback_link must be an http(s) URL")
    return link


def validate_question(data: Any, position: int) -> QuestionInput:
    label = f"Question {position + 1}"
    if not isinstance(data, dict):
        raise InvalidInput(f"{label}: must be an object")

    text = data.get('question_text')
    if not isinstance(text, str) or not text.strip():
        raise InvalidInput(f"{label}: question_text is required")

    options = data.get('options')
    if not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION:
        raise InvalidInput(f"{label}: must have exactly {OPTIONS_PER_QUESTION} options")
    cleaned_options = []
    for option in options:
        if not isinstance(option, str) or not option.strip():
            raise InvalidInput(f"{label}: options must be non-empty text")
        cleaned_options.append(option.strip())

    correct_answer = data.get('correct_answer')
    if not _is_int(correct_answer) or not 0 <= correct_answer < OPTIONS_PER_QUESTION:
        raise InvalidInput(f"{label}: must have a valid correct answer (0-{OPTIONS_PER_QUESTION - 1})")

    time_limit = data.get('time_limit_seconds')
    if not _is_int(time_limit) or not MIN_TIME_LIMIT_SECONDS <= time_limit <= MAX_TIME_LIMIT_SECONDS:
        raise InvalidInput(
            f"{label}: time limit must be between {MIN_TIME_LIMIT_SECONDS} "
            f"and {MAX_TIME_LIMIT_SECONDS} seconds"
        )

    return QuestionInput(
        question_text=text.strip(),
        options=cleaned_options,
        correct_answer=correct_answer,
        time_limit_seconds=time_limit,
        image_ref=_optional_text(data.get('image_ref'), f"{label}: image_ref", MAX_URL_LENGTH),
    )


def validate_quiz_payload(data: Any) -> QuizInput:
    """Validate a create or update body. Both operations share these rules."""
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object")

    title = data.get('title')
    if not isinstance(title, str) or not title.strip():
        raise InvalidInput("Quiz title is required")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidInput(f"Quiz title must be at most {MAX_TITLE_LENGTH} characters")

    questions = data.get('questions')
    if not isinstance(questions, list) or not questions:
        raise InvalidInput("At least one question is required")
    if len(questions) > MAX_QUESTIONS_PER_QUIZ:
        raise InvalidInput(f"A quiz can have at most {MAX_QUESTIONS_PER_QUIZ} questions")

    linked_event_id = data.get('linked_event_id')
    if linked_event_id in (None, ""):
        linked_event_id = None
    elif not _is_int(linked_event_id) or linked_event_id <= 0:
        raise InvalidInput("linked_event_id must be a positive integer")

    available_from = parse_timestamp(data.get('available_from'), "available_from")
    available_until = parse_timestamp(data.get('available_until'), "available_until")
    if available_from and available_until and available_from > available_until:
        raise InvalidInput("available_from must not be after available_until")

    return QuizInput(
        title=title,
        questions=[validate_question(question, index) for index, question in enumerate(questions)],
        feedback_link=validate_feedback_link(data.get('feedback_link')),
        linked_event_id=linked_event_id,
        available_from=available_from,
        available_until=available_until,
    )


def validate_answers(payload: Any) -> list[AnswerInput]:
    """
    Validate a submission body of the form ``{"answers": [...]}``.

    Each answer is ``{question_index, selected_option, time_taken}``;
    ``selected_option`` defaults to -1 (unanswered) and ``time_taken`` to 0.
    Duplicate question indexes are allowed here and resolved by scoring.
    """
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    answers = payload.get('answers')
    if not isinstance(answers, list):
        raise InvalidInput("Answers are required")
    if len(answers) > MAX_QUESTIONS_PER_QUIZ:
        raise InvalidInput("Too many answers")

    parsed = []
    for position, answer in enumerate(answers):
        label = f"Answer {position + 1}"
        if not isinstance(answer, dict):
            raise InvalidInput(f"{label}: must be an object")
        unknown = set(answer) - ANSWER_FIELDS
        if unknown:
            raise InvalidInput(f"{label}: unexpected field(s) {', '.join(sorted(unknown))}")

        question_index = answer.get('question_index')
        if not _is_int(question_index) or question_index < 0:
            raise InvalidInput(f"{label}: question_index must be a non-negative integer")

        selected_option = answer.get('selected_option', UNANSWERED)
        if not _is_int(selected_option) or not UNANSWERED <= selected_option < OPTIONS_PER_QUESTION:
            raise InvalidInput(f"{label}: selected_option must be between -1 and {OPTIONS_PER_QUESTION - 1}")

        time_taken = answer.get('time_taken', 0)
        if not _is_int(time_taken) or not 0 <= time_taken <= MAX_TIME_TAKEN_SECONDS:
            raise InvalidInput(f"{label}: time_taken must be a non-negative number of seconds")

        parsed.append(AnswerInput(question_index, selected_option, time_taken))
    return parsed
