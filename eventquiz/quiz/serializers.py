"""
JSON views of quizzes and responses.

``serialize_quiz_safe`` is the only view a non-administrator ever receives
for a single quiz: it has no ``correct_answer`` and no response counts. The
public list gets ``serialize_quiz_summary``, which carries no question content.
"""
from datetime import datetime
from typing import Optional

from eventquiz.quiz.models import Quiz, QuizResponse


def utc_isoformat(value: Optional[datetime]) -> Optional[str]:
    """Render a naive UTC datetime as ISO 8601 with a ``Z`` suffix."""
    return value.isoformat() + 'Z' if value else None


def serialize_quiz_summary(quiz: Quiz) -> dict:
    return {
        'id': quiz.id,
        'title': quiz.title,
        'linked_event_id': quiz.linked_event_id,
        'available_from': utc_isoformat(quiz.available_from),
        'available_until': utc_isoformat(quiz.available_until),
        'question_count': quiz.get_question_count(),
    }


def serialize_quiz_safe(quiz: Quiz, transition_delay_ms: int) -> dict:
    return {
        'id': quiz.id,
        'title': quiz.title,
        'feedback_link': quiz.feedback_link,
        'linked_event_id': quiz.linked_event_id,
        'available_from': utc_isoformat(quiz.available_from),
        'available_until': utc_isoformat(quiz.available_until),
        'question_count': quiz.get_question_count(),
        'transition_delay_ms': transition_delay_ms,
        'questions': [
            {
                'question_text': question.question_text,
                'options': question.option_texts(),
                'time_limit_seconds': question.time_limit_seconds,
                'image_ref': question.image_ref,
            }
            for question in quiz.questions
        ],
    }


def serialize_quiz_admin(quiz: Quiz, response_count: int) -> dict:
    return {
        'id': quiz.id,
        'title': quiz.title,
        'feedback_link': quiz.feedback_link,
        'linked_event_id': quiz.linked_event_id,
        'available_from': utc_isoformat(quiz.available_from),
        'available_until': utc_isoformat(quiz.available_until),
        'is_active': quiz.is_active,
        'created_at': utc_isoformat(quiz.created_at),
        'updated_at': utc_isoformat(quiz.updated_at),
        'question_count': quiz.get_question_count(),
        'response_count': response_count,
        'questions': [
            {
                'question_text': question.question_text,
                'options': question.option_texts(),
                'correct_answer': question.correct_answer,
                'time_limit_seconds': question.time_limit_seconds,
                'image_ref': question.image_ref,
            }
            for question in quiz.questions
        ],
    }


def serialize_response(response: QuizResponse) -> dict:
    """Administrator view of a stored response."""
    return {
        'id': response.id,
        'quiz_id': response.quiz_id,
        'user_name': response.user_name,
        'user_email': response.user_email,
        'score': response.score,
        'total_questions': response.total_questions,
        'total_time_taken_seconds': response.total_time_taken_seconds,
        'submitted_at': utc_isoformat(response.submitted_at),
        'answers': [
            {
                'question_index': answer.question_index,
                'selected_option': answer.selected_option,
                'time_taken': answer.time_taken_seconds,
            }
            for answer in response.answers
        ],
    }
