"""Create event quiz tables

Revision ID: 4e7a91c2b0d3
Revises:
Create Date: 2026-10-19 10:12:03.118204

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision = '4e7a91c2b0d3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    inspector = inspect(op.get_bind())
    tables = inspector.get_table_names()

    if 'users' not in tables:
        op.create_table('users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('full_name', sa.String(length=255), nullable=False),
            sa.Column('user_type', sa.String(length=20), nullable=False, server_default='participant'),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_users_email', 'users', ['email'], unique=True)

    if 'events' not in tables:
        op.create_table('events',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_events_created_at', 'events', ['created_at'], unique=False)

    if 'event_registrations' not in tables:
        op.create_table('event_registrations',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('event_id', sa.Integer(), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('full_name', sa.String(length=255), nullable=True),
            sa.Column('registered_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['event_id'], ['events.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('event_id', 'email', name='uq_event_registration_email')
        )
        op.create_index('ix_event_registrations_event_id', 'event_registrations', ['event_id'], unique=False)

    if 'quizzes' not in tables:
        op.create_table('quizzes',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('feedback_link', sa.String(length=500), nullable=True),
            sa.Column('linked_event_id', sa.Integer(), nullable=True),
            sa.Column('available_from', sa.DateTime(), nullable=True),
            sa.Column('available_until', sa.DateTime(), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['linked_event_id'], ['events.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quizzes_linked_event_id', 'quizzes', ['linked_event_id'], unique=False)
        op.create_index('ix_quizzes_is_active', 'quizzes', ['is_active'], unique=False)
        op.create_index('ix_quizzes_created_at', 'quizzes', ['created_at'], unique=False)
        op.create_index('ix_quizzes_event_active', 'quizzes', ['linked_event_id', 'is_active'], unique=False)

    if 'quiz_questions' not in tables:
        op.create_table('quiz_questions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('question_text', sa.Text(), nullable=False),
            sa.Column('correct_answer', sa.Integer(), nullable=False),
            sa.Column('time_limit_seconds', sa.Integer(), nullable=False, server_default='30'),
            sa.Column('image_ref', sa.String(length=500), nullable=True),
            sa.CheckConstraint('correct_answer >= 0 AND correct_answer <= 3', name='ck_quiz_questions_correct_answer'),
            sa.CheckConstraint('time_limit_seconds >= 5 AND time_limit_seconds <= 300', name='ck_quiz_questions_time_limit'),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_questions_quiz_id', 'quiz_questions', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_questions_quiz_order', 'quiz_questions', ['quiz_id', 'order_index'], unique=False)

    if 'quiz_question_options' not in tables:
        op.create_table('quiz_question_options',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('order_index', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('option_text', sa.Text(), nullable=False),
            sa.ForeignKeyConstraint(['question_id'], ['quiz_questions.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_question_options_question_id', 'quiz_question_options', ['question_id'], unique=False)

    if 'quiz_responses' not in tables:
        op.create_table('quiz_responses',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('quiz_id', sa.Integer(), nullable=False),
            sa.Column('user_name', sa.String(length=255), nullable=False),
            sa.Column('user_email', sa.String(length=255), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False),
            sa.Column('total_questions', sa.Integer(), nullable=False),
            sa.Column('total_time_taken_seconds', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('submitted_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['quiz_id'], ['quizzes.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('quiz_id', 'user_email', name='uq_quiz_response_user')
        )
        op.create_index('ix_quiz_responses_quiz_id', 'quiz_responses', ['quiz_id'], unique=False)
        op.create_index('ix_quiz_responses_submitted_at', 'quiz_responses', ['submitted_at'], unique=False)
        op.create_index('ix_quiz_responses_quiz_submitted', 'quiz_responses', ['quiz_id', 'submitted_at'], unique=False)

    if 'quiz_response_answers' not in tables:
        op.create_table('quiz_response_answers',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('response_id', sa.Integer(), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False),
            sa.Column('question_index', sa.Integer(), nullable=False),
            sa.Column('selected_option', sa.Integer(), nullable=False, server_default='-1'),
            sa.Column('time_taken_seconds', sa.Integer(), nullable=False, server_default='0'),
            sa.ForeignKeyConstraint(['response_id'], ['quiz_responses.id'], ondelete='CASCADE'),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_quiz_response_answers_response_id', 'quiz_response_answers', ['response_id'], unique=False)


def downgrade():
    op.drop_table('quiz_response_answers')
    op.drop_table('quiz_responses')
    op.drop_table('quiz_question_options')
    op.drop_table('quiz_questions')
    op.drop_table('quizzes')
    op.drop_table('event_registrations')
    op.drop_table('events')
    op.drop_table('users')
