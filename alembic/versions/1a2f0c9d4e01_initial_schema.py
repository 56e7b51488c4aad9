"""initial_schema

Revision ID: 1a2f0c9d4e01
Revises:
Create Date: 2026-10-19 10:12:44.318202

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '1a2f0c9d4e01'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


assessment_type = sa.Enum('ONLINE', 'OFFLINE', 'BLENDED', name='assessmenttype')
question_type = sa.Enum('MCQ', 'DESCRIPTIVE', 'PRACTICAL', 'VIVA', 'PEN_PAPER', name='questiontype')
session_status = sa.Enum('IN_PROGRESS', 'COMPLETED', name='sessionstatus')


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    # Course content
    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_table(
        'courses',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.Text(), nullable=True),
        sa.Column('price', sa.Float(), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_courses_user_id', 'courses', ['user_id'])

    op.create_table(
        'chapters',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('course_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('is_free', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_chapters_course_id', 'chapters', ['course_id'])

    op.create_table(
        'purchases',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('course_id', sa.String(length=36), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'course_id', name='unique_user_course_purchase'),
    )
    op.create_index('ix_purchases_user_id', 'purchases', ['user_id'])
    op.create_index('ix_purchases_course_id', 'purchases', ['course_id'])

    op.create_table(
        'user_progress',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('chapter_id', sa.String(length=36), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['chapter_id'], ['chapters.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'chapter_id', name='unique_user_chapter_progress'),
    )
    op.create_index('ix_user_progress_user_id', 'user_progress', ['user_id'])
    op.create_index('ix_user_progress_chapter_id', 'user_progress', ['chapter_id'])

    # Assessments
    op.create_table(
        'assessments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_by_id', sa.String(), nullable=False),
        sa.Column('course_id', sa.String(length=36), nullable=True),
        sa.Column('title', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('assessment_type', assessment_type, nullable=False),
        sa.Column('question_format', sa.JSON(), nullable=False),
        sa.Column('inclusivity_mode', sa.Boolean(), nullable=False),
        sa.Column('difficulty_level', sa.Integer(), nullable=True),
        sa.Column('is_published', sa.Boolean(), nullable=False),
        sa.Column('results_published', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['course_id'], ['courses.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_assessments_created_by_id', 'assessments', ['created_by_id'])

    op.create_table(
        'assessment_questions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('assessment_id', sa.String(length=36), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.Column('question_type', question_type, nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=True),
        sa.Column('correct_answer', sa.Text(), nullable=True),
        sa.Column('marks', sa.Integer(), nullable=False),
        sa.Column('difficulty_level', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['assessment_id'], ['assessments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_assessment_questions_assessment_id', 'assessment_questions', ['assessment_id'])

    op.create_table(
        'assessment_sessions',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('assessment_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('status', session_status, nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['assessment_id'], ['assessments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_assessment_sessions_assessment_id', 'assessment_sessions', ['assessment_id'])
    op.create_index('ix_assessment_sessions_user_id', 'assessment_sessions', ['user_id'])
    op.create_index('idx_session_assessment_user', 'assessment_sessions', ['assessment_id', 'user_id'])

    op.create_table(
        'assessment_responses',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('session_id', sa.String(length=36), nullable=False),
        sa.Column('question_id', sa.String(length=36), nullable=False),
        sa.Column('answer', sa.Text(), nullable=True),
        sa.Column('is_correct', sa.Boolean(), nullable=True),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('ai_evaluation', sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['session_id'], ['assessment_sessions.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['question_id'], ['assessment_questions.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_assessment_responses_session_id', 'assessment_responses', ['session_id'])
    op.create_index('ix_assessment_responses_question_id', 'assessment_responses', ['question_id'])


def downgrade() -> None:
    op.drop_table('assessment_responses')
    op.drop_table('assessment_sessions')
    op.drop_table('assessment_questions')
    op.drop_table('assessments')
    op.drop_table('user_progress')
    op.drop_table('purchases')
    op.drop_table('chapters')
    op.drop_table('courses')
    op.drop_table('categories')

    bind = op.get_bind()
    session_status.drop(bind, checkfirst=True)
    question_type.drop(bind, checkfirst=True)
    assessment_type.drop(bind, checkfirst=True)
