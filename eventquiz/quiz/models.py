"""
Database models for the quiz engine.

A quiz is an ordered list of four-option questions, each with its own time
limit. Responses are stored once per (quiz, email) and never updated.
"""
from datetime import datetime

from eventquiz import db


OPTIONS_PER_QUESTION = 4
MIN_TIME_LIMIT_SECONDS = 5
MAX_TIME_LIMIT_SECONDS = 300
UNANSWERED = -1


class Quiz(db.Model):
    """
    Model for published quizzes.

    Availability is gated by ``is_active``, the optional
    ``available_from``/``available_until`` window (naive UTC, inclusive on
    both ends) and the optional ``linked_event_id`` registration list.
    """
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    feedback_link = db.Column(db.String(500), nullable=True)
    linked_event_id = db.Column(db.Integer, db.ForeignKey("events.id"), nullable=True, index=True)
    available_from = db.Column(db.DateTime, nullable=True)
    available_until = db.Column(db.DateTime, nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    linked_event = db.relationship("Event")
    questions = db.relationship(
        "QuizQuestion", backref="quiz", cascade="all, delete-orphan",
        order_by="QuizQuestion.order_index"
    )
    responses = db.relationship("QuizResponse", backref="quiz", cascade="all, delete-orphan")

    __table_args__ = (
        db.Index('ix_quizzes_event_active', 'linked_event_id', 'is_active'),
    )

    def __repr__(self) -> str:
        return f"<Quiz {self.id}: {self.title}>"

    def get_question_count(self) -> int:
        return len(self.questions)

    def answer_key(self) -> list[int]:
        """Correct option index per question, in question order. Server side only."""
        return [question.correct_answer for question in self.questions]


class QuizQuestion(db.Model):
    """A single timed question with exactly four options."""
    __tablename__ = "quiz_questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    question_text = db.Column(db.Text, nullable=False)
    correct_answer = db.Column(db.Integer, nullable=False)
    time_limit_seconds = db.Column(db.Integer, nullable=False, default=30)
    image_ref = db.Column(db.String(500), nullable=True)

    options = db.relationship(
        "QuizQuestionOption", backref="question", cascade="all, delete-orphan",
        order_by="QuizQuestionOption.order_index"
    )

    __table_args__ = (
        db.Index('ix_quiz_questions_quiz_order', 'quiz_id', 'order_index'),
        db.CheckConstraint('correct_answer >= 0 AND correct_answer <= 3', name='ck_quiz_questions_correct_answer'),
        db.CheckConstraint(
            f'time_limit_seconds >= {MIN_TIME_LIMIT_SECONDS} AND time_limit_seconds <= {MAX_TIME_LIMIT_SECONDS}',
            name='ck_quiz_questions_time_limit'
        ),
    )

    def __repr__(self) -> str:
        return f"<QuizQuestion {self.id}: quiz={self.quiz_id} #{self.order_index}>"

    def option_texts(self) -> list[str]:
        return [option.option_text for option in self.options]


class QuizQuestionOption(db.Model):
    __tablename__ = "quiz_question_options"

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey("quiz_questions.id", ondelete='CASCADE'), nullable=False, index=True)
    order_index = db.Column(db.Integer, nullable=False, default=0)
    option_text = db.Column(db.Text, nullable=False)

    def __repr__(self) -> str:
        return f"<QuizQuestionOption {self.id}: {self.option_text[:50]}>"


class QuizResponse(db.Model):
    """
    One participant's scored submission for a quiz.

    ``uq_quiz_response_user`` is what makes a submission single-attempt:
    concurrent inserts for the same (quiz, email) cannot both commit.
    """
    __tablename__ = "quiz_responses"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id", ondelete='CASCADE'), nullable=False, index=True)
    user_name = db.Column(db.String(255), nullable=False)
    user_email = db.Column(db.String(255), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    total_questions = db.Column(db.Integer, nullable=False)
    total_time_taken_seconds = db.Column(db.Integer, nullable=False, default=0)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False, index=True)

    answers = db.relationship(
        "QuizResponseAnswer", backref="response", cascade="all, delete-orphan",
        order_by="QuizResponseAnswer.position"
    )

    __table_args__ = (
        db.UniqueConstraint('quiz_id', 'user_email', name='uq_quiz_response_user'),
        db.Index('ix_quiz_responses_quiz_submitted', 'quiz_id', 'submitted_at'),
    )

    def __repr__(self) -> str:
        return f"<QuizResponse {self.id}: quiz={self.quiz_id} email={self.user_email}>"


class QuizResponseAnswer(db.Model):
    """A submitted answer, kept in the order the client sent it."""
    __tablename__ = "quiz_response_answers"

    id = db.Column(db.Integer, primary_key=True)
    response_id = db.Column(db.Integer, db.ForeignKey("quiz_responses.id", ondelete='CASCADE'), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)
    question_index = db.Column(db.Integer, nullable=False)
    selected_option = db.Column(db.Integer, nullable=False, default=UNANSWERED)
    time_taken_seconds = db.Column(db.Integer, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<QuizResponseAnswer response={self.response_id} q={self.question_index}>"
