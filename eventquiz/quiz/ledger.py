"""
Submission ledger: the append-only store of quiz responses.

Uniqueness of (quiz, email) is left to the ``uq_quiz_response_user``
constraint. ``record`` inserts and lets the database decide; a violation
becomes ``AlreadySubmitted``.
"""
from typing import Optional, Sequence

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from eventquiz import db
from eventquiz.auth.identity import CallerIdentity
from eventquiz.quiz.errors import AlreadySubmitted, StorageFailure
from eventquiz.quiz.models import QuizResponse, QuizResponseAnswer
from eventquiz.quiz.scoring import ScoreResult
from eventquiz.quiz.validation import AnswerInput

UNIQUE_CONSTRAINT_NAME = "uq_quiz_response_user"


def is_duplicate_submission(error: IntegrityError) -> bool:
    """True when ``error`` is a violation of the one-response-per-user constraint."""
    message = str(error.orig).lower()
    if UNIQUE_CONSTRAINT_NAME in message:
        return True
    # SQLite names the columns instead of the constraint
    return "unique constraint failed" in message and "quiz_responses.user_email" in message


class SubmissionLedger:

    def has_submitted(self, quiz_id: int, email: str) -> bool:
        return db.session.query(QuizResponse.id).filter_by(
            quiz_id=quiz_id, user_email=email
        ).first() is not None

    def record(self, quiz_id: int, caller: CallerIdentity, answers: Sequence[AnswerInput],
               result: ScoreResult) -> QuizResponse:
        """
        Persist one scored response, with its answers, in a single transaction.

        Raises:
            AlreadySubmitted: a response for (quiz_id, caller.email) already exists
            StorageFailure: any other database error
        """
        response = QuizResponse(
            quiz_id=quiz_id,
            user_name=caller.name,
            user_email=caller.email,
            score=result.score,
            total_questions=result.total_questions,
            total_time_taken_seconds=result.total_time_taken,
            answers=[
                QuizResponseAnswer(
                    position=position,
                    question_index=answer.question_index,
                    selected_option=answer.selected_option,
                    time_taken_seconds=answer.time_taken,
                )
                for position, answer in enumerate(answers)
            ],
        )
        db.session.add(response)
        try:
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            if is_duplicate_submission(exc):
                raise AlreadySubmitted() from exc
            current_app.logger.exception(f"Integrity error recording response for quiz {quiz_id}")
            raise StorageFailure() from exc
        except SQLAlchemyError as exc:
            db.session.rollback()
            current_app.logger.exception(f"Error recording response for quiz {quiz_id}")
            raise StorageFailure() from exc
        return response

    def list_responses(self, quiz_id: Optional[int] = None) -> list[QuizResponse]:
        """Responses newest first, optionally for a single quiz."""
        query = QuizResponse.query
        if quiz_id is not None:
            query = query.filter_by(quiz_id=quiz_id)
        return query.order_by(QuizResponse.submitted_at.desc(), QuizResponse.id.desc()).all()

    def response_counts(self, quiz_ids: Optional[Sequence[int]] = None) -> dict[int, int]:
        query = db.session.query(QuizResponse.quiz_id, func.count(QuizResponse.id))
        if quiz_ids is not None:
            query = query.filter(QuizResponse.quiz_id.in_(list(quiz_ids)))
        return {quiz_id: count for quiz_id, count in query.group_by(QuizResponse.quiz_id).all()}

    def count_for_quiz(self, quiz_id: int) -> int:
        return QuizResponse.query.filter_by(quiz_id=quiz_id).count()

    def delete_response(self, response_id: int) -> bool:
        """Administrator deletion of a single response. Returns False if it did not exist."""
        response = db.session.get(QuizResponse, response_id)
        if response is None:
            return False
        db.session.delete(response)
        db.session.commit()
        return True
