"""
Quiz operations used by the taker and admin blueprints.

Routes stay thin: they resolve the caller, call one function here and turn
``QuizError`` into JSON. Every function either returns model objects or
raises a ``QuizError``; database errors surface as ``StorageFailure``.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from eventquiz import db
from eventquiz.auth.identity import CallerIdentity
from eventquiz.events.registry import RegistrationDirectory
from eventquiz.quiz.eligibility import check_access, ensure_can_submit
from eventquiz.quiz.errors import AuthRequired, InvalidInput, NotFound, StorageFailure
from eventquiz.quiz.ledger import SubmissionLedger
from eventquiz.quiz.models import Quiz, QuizQuestion, QuizQuestionOption, QuizResponse
from eventquiz.quiz.scoring import score_submission
from eventquiz.quiz.validation import QuestionInput, QuizInput, validate_answers, validate_quiz_payload

registrations = RegistrationDirectory()
ledger = SubmissionLedger()


@dataclass(frozen=True)
class SubmitResult:
    feedback_link: Optional[str]


def _commit(action: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"Error while {action}")
        raise StorageFailure() from exc


def _get_quiz(quiz_id: int) -> Quiz:
    quiz = db.session.get(Quiz, quiz_id)
    if quiz is None:
        raise NotFound()
    return quiz


# --- Taker operations -------------------------------------------------------

def view_quiz(quiz_id: int, caller: Optional[CallerIdentity],
              now: Optional[datetime] = None) -> tuple[Quiz, bool]:
    """Return the quiz and the advisory ``already_submitted`` flag, or raise why not."""
    quiz = _get_quiz(quiz_id)
    decision = check_access(quiz, caller, now or datetime.utcnow(), registrations, ledger)
    if not decision.allowed:
        raise decision.error
    return quiz, decision.already_submitted


def list_available_quizzes(event_id: Optional[int] = None) -> list[Quiz]:
    query = Quiz.query.filter_by(is_active=True)
    if event_id is not None:
        query = query.filter_by(linked_event_id=event_id)
    return query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()


def submit_quiz(quiz_id: int, caller: Optional[CallerIdentity], payload: Any,
                now: Optional[datetime] = None) -> SubmitResult:
    """
    Score and record a submission.

    Checks run in order and stop at the first failure: identity, payload
    shape, quiz existence, time window, event registration, prior
    submission. The time window is evaluated at this instant, not when the
    taker started.
    """
    if caller is None:
        raise AuthRequired()
    answers = validate_answers(payload)
    quiz = ensure_can_submit(
        db.session.get(Quiz, quiz_id), caller, now or datetime.utcnow(), registrations, ledger
    )

    result = score_submission(quiz.answer_key(), answers)
    ledger.record(quiz.id, caller, answers, result)
    current_app.logger.info(
        f"Recorded submission for quiz {quiz.id} by {caller.email} ({len(answers)} answers)"
    )
    return SubmitResult(feedback_link=quiz.feedback_link)


# --- Administrator operations -------------------------------------------------

def _build_question(question_input: QuestionInput, order_index: int) -> QuizQuestion:
    return QuizQuestion(
        order_index=order_index,
        question_text=question_input.question_text,
        correct_answer=question_input.correct_answer,
        time_limit_seconds=question_input.time_limit_seconds,
        image_ref=question_input.image_ref,
        options=[
            QuizQuestionOption(order_index=index, option_text=text)
            for index, text in enumerate(question_input.options)
        ],
    )


def _apply_quiz_input(quiz: Quiz, quiz_input: QuizInput) -> None:
    if quiz_input.linked_event_id is not None and not registrations.event_exists(quiz_input.linked_event_id):
        raise InvalidInput("Linked event not found")
    quiz.title = quiz_input.title
    quiz.feedback_link = quiz_input.feedback_link
    quiz.linked_event_id = quiz_input.linked_event_id
    quiz.available_from = quiz_input.available_from
    quiz.available_until = quiz_input.available_until
    # Full replace; delete-orphan removes the previous questions and options
    quiz.questions = [
        _build_question(question_input, index)
        for index, question_input in enumerate(quiz_input.questions)
    ]


def create_quiz(payload: Any) -> Quiz:
    quiz_input = validate_quiz_payload(payload)
    quiz = Quiz(is_active=True)
    _apply_quiz_input(quiz, quiz_input)
    db.session.add(quiz)
    _commit("creating quiz")
    current_app.logger.info(f"Created quiz {quiz.id} with {quiz.get_question_count()} questions")
    return quiz


def update_quiz(quiz_id: int, payload: Any) -> Quiz:
    quiz = _get_quiz(quiz_id)
    quiz_input = validate_quiz_payload(payload)
    _apply_quiz_input(quiz, quiz_input)
    _commit(f"updating quiz {quiz_id}")
    current_app.logger.info(f"Updated quiz {quiz.id}")
    return quiz


def set_quiz_active(quiz_id: int, is_active: Any) -> Quiz:
    if not isinstance(is_active, bool):
        raise InvalidInput("is_active must be true or false")
    quiz = _get_quiz(quiz_id)
    quiz.is_active = is_active
    _commit(f"toggling quiz {quiz_id}")
    current_app.logger.info(f"Quiz {quiz.id} is_active={is_active}")
    return quiz


def delete_quiz(quiz_id: int) -> int:
    """Delete a quiz and, through the cascade, all of its responses. Returns how many went."""
    quiz = _get_quiz(quiz_id)
    removed = ledger.count_for_quiz(quiz.id)
    db.session.delete(quiz)
    _commit(f"deleting quiz {quiz_id}")
    current_app.logger.info(f"Deleted quiz {quiz_id} and {removed} responses")
    return removed


def get_quiz_for_admin(quiz_id: int) -> tuple[Quiz, int]:
    quiz = _get_quiz(quiz_id)
    return quiz, ledger.count_for_quiz(quiz.id)


def list_quizzes_for_admin(event_id: Optional[int] = None) -> list[tuple[Quiz, int]]:
    query = Quiz.query
    if event_id is not None:
        query = query.filter_by(linked_event_id=event_id)
    quizzes = query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()
    counts = ledger.response_counts([quiz.id for quiz in quizzes])
    return [(quiz, counts.get(quiz.id, 0)) for quiz in quizzes]


def list_responses(quiz_id: Optional[int] = None) -> list[QuizResponse]:
    return ledger.list_responses(quiz_id)


def delete_response(response_id: int) -> None:
    try:
        deleted = ledger.delete_response(response_id)
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.exception(f"Error deleting response {response_id}")
        raise StorageFailure() from exc
    if not deleted:
        raise NotFound("Response not found")
    current_app.logger.info(f"Deleted response {response_id}")
