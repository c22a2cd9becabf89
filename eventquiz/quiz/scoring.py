"""
Server-side scoring.

The result produced here is stored on the response and shown to
administrators only; nothing in this module is ever returned to a taker.
"""
from dataclasses import dataclass
from typing import Sequence

from eventquiz.quiz.models import UNANSWERED
from eventquiz.quiz.validation import AnswerInput


@dataclass(frozen=True)
class ScoreResult:
    score: int
    total_questions: int
    total_time_taken: int


def select_answers(question_count: int, answers: Sequence[AnswerInput]) -> list[int]:
    """
    Resolve the selected option for each question index.

    The first answer for an index wins, in submission order. Indexes without
    an answer resolve to ``UNANSWERED``; answers for indexes outside the quiz
    are ignored.
    """
    first_by_index = {}
    for answer in answers:
        first_by_index.setdefault(answer.question_index, answer)
    return [
        first_by_index[index].selected_option if index in first_by_index else UNANSWERED
        for index in range(question_count)
    ]


def score_submission(answer_key: Sequence[int], answers: Sequence[AnswerInput]) -> ScoreResult:
    selected = select_answers(len(answer_key), answers)
    score = sum(
        1 for choice, correct in zip(selected, answer_key)
        if choice != UNANSWERED and choice == correct
    )
    return ScoreResult(
        score=score,
        total_questions=len(answer_key),
        total_time_taken=sum(answer.time_taken for answer in answers),
    )
