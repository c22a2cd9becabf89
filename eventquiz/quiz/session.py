"""
Taker-side session over a fetched quiz.

A ``QuizSession`` walks the questions of a safe quiz view one at a time,
with a per-question countdown and no way back. The driver (a browser
script, a test or a bot) feeds it events and is responsible for calling
``timer_tick`` once per second and ``advance`` once ``transition_delay_ms``
has elapsed after a question is recorded.

Every event returns ``True`` when it was accepted and ``False`` when it is
not valid in the current state. Nothing here talks to the server directly;
submission goes through the ``submit`` callable given at construction.
"""
from enum import Enum
from typing import Any, Callable, Optional

from eventquiz.quiz.models import OPTIONS_PER_QUESTION, UNANSWERED

SubmitCallable = Callable[[dict], Optional[dict]]


class SessionState(Enum):
    NOT_STARTED = "not_started"
    IN_QUESTION = "in_question"
    TRANSITIONING = "transitioning"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    BLOCKED = "blocked"
    ERROR = "error"


class QuizSession:
    """
    Args:
        view: body returned by the quiz detail endpoint. A body with
            ``success`` false, or with ``already_submitted`` true, gives a
            session that can never start.
        submit: called exactly once with ``{"answers": [...]}``. If it
            returns the server's JSON body, the outcome is applied
            immediately; if it returns ``None`` the driver must call
            ``submit_result`` later.
        transition_delay_ms: pause between questions. Defaults to the
            value advertised by the quiz view.
    """

    def __init__(self, view: dict, submit: SubmitCallable, transition_delay_ms: Optional[int] = None):
        self._submit = submit
        self.quiz = view.get('quiz') or {}
        self.questions = self.quiz.get('questions') or []
        if transition_delay_ms is None:
            transition_delay_ms = self.quiz.get('transition_delay_ms', 300)
        self.transition_delay_ms = transition_delay_ms

        self.block_reason = None
        if not view.get('success'):
            self.block_reason = view.get('reason') or 'unavailable'
        elif view.get('already_submitted'):
            self.block_reason = 'already_submitted'
        elif not self.questions:
            self.block_reason = 'not_found'

        self.state = SessionState.BLOCKED if self.block_reason else SessionState.NOT_STARTED
        self.current_index = -1
        self.remaining_seconds = 0
        self.selection = None
        self.answers: list[dict] = []
        self.feedback_link = None
        self.error = None

    # --- properties --------------------------------------------------------

    @property
    def current_question(self) -> Optional[dict]:
        if self.state is SessionState.IN_QUESTION:
            return self.questions[self.current_index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.state in (SessionState.COMPLETED, SessionState.BLOCKED, SessionState.ERROR)

    # --- events ------------------------------------------------------------

    def start(self) -> bool:
        if self.state is not SessionState.NOT_STARTED:
            return False
        self._show(0)
        return True

    def select(self, option: int) -> bool:
        if isinstance(option, bool) or not isinstance(option, int) or not 0 <= option < OPTIONS_PER_QUESTION:
            raise ValueError(f"option must be an integer between 0 and {OPTIONS_PER_QUESTION - 1}")
        if self.state is not SessionState.IN_QUESTION:
            return False
        self.selection = option
        return True

    def next(self) -> bool:
        """Record the current question and move on."""
        if self.state is not SessionState.IN_QUESTION:
            return False
        self._record()
        return True

    def timer_tick(self) -> bool:
        if self.state is not SessionState.IN_QUESTION:
            return False
        self.remaining_seconds = max(self.remaining_seconds - 1, 0)
        if self.remaining_seconds == 0:
            self._record()
        return True

    def advance(self) -> bool:
        """End the transition pause and present the next question."""
        if self.state is not SessionState.TRANSITIONING:
            return False
        self._show(self.current_index + 1)
        return True

    def submit_result(self, outcome: dict) -> bool:
        if self.state is not SessionState.SUBMITTING:
            return False
        if outcome.get('success') or outcome.get('reason') == 'already_submitted':
            self.state = SessionState.COMPLETED
            self.feedback_link = outcome.get('feedback_link')
        else:
            self.state = SessionState.ERROR
            self.error = outcome.get('error') or outcome.get('reason') or 'Submission failed'
        return True

    # --- internals ---------------------------------------------------------

    def _show(self, index: int) -> None:
        self.current_index = index
        self.remaining_seconds = self.questions[index]['time_limit_seconds']
        self.selection = None
        self.state = SessionState.IN_QUESTION

    def _record(self) -> None:
        limit = self.questions[self.current_index]['time_limit_seconds']
        self.answers.append({
            'question_index': self.current_index,
            'selected_option': UNANSWERED if self.selection is None else self.selection,
            'time_taken': limit - self.remaining_seconds,
        })
        self.selection = None
        if self.current_index + 1 < len(self.questions):
            self.state = SessionState.TRANSITIONING
        else:
            self._send()

    def _send(self) -> None:
        self.state = SessionState.SUBMITTING
        try:
            outcome: Any = self._submit({'answers': list(self.answers)})
        except Exception:
            # terminal; the answers are never resent
            self.state = SessionState.ERROR
            self.error = 'Submission failed'
            return
        if outcome is not None:
            self.submit_result(outcome)
