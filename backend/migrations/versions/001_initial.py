"""Initial migration - create all tables

Revision ID: 001_initial
Revises: None
Create Date: 2024-09-05

Creates all database tables for the Academic Ranking Service:
- accounts: login identities with role and verification state
- student_profiles / teacher_profiles: per-role profile data
- score_entries: component scores and weighted average per subject and term
- subjects, classes, academic_years, academic_criteria: reference data
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── Accounts Table ────────────────────────────────────────
    op.create_table(
        'accounts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('username', sa.Text(), nullable=False, unique=True),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('full_name', sa.Text(), nullable=False),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('is_super_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('verified_by', sa.String(36), nullable=True),
        sa.Column('verification_timestamp', sa.Text(), nullable=True),
        sa.Column('created_at', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.Text(), nullable=False),
    )

    # ── Profiles (no FK to accounts: profiles outlive deleted accounts) ──
    op.create_table(
        'student_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(36), nullable=False, unique=True),
        sa.Column('student_code', sa.Text(), nullable=False, unique=True),
        sa.Column('class_name', sa.Text(), nullable=False),
        sa.Column('grade', sa.Text(), nullable=False),
        sa.Column('date_of_birth', sa.Text(), nullable=True),
        sa.Column('academic_year', sa.Text(), nullable=False),
    )

    op.create_table(
        'teacher_profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('account_id', sa.String(36), nullable=False, unique=True),
        sa.Column('teacher_code', sa.Text(), nullable=False, unique=True),
    )

    # ── Score Entries Table ───────────────────────────────────
    op.create_table(
        'score_entries',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('student_id', sa.String(36),
                  sa.ForeignKey('student_profiles.id'), nullable=False),
        sa.Column('subject_name', sa.Text(), nullable=False),
        sa.Column('subject_weight', sa.Float(), nullable=False, server_default='1.0'),
        sa.Column('quiz_score', sa.Float(), nullable=True),
        sa.Column('periodic_score', sa.Float(), nullable=True),
        sa.Column('final_score', sa.Float(), nullable=True),
        sa.Column('weighted_avg', sa.Float(), nullable=True),
        sa.Column('semester', sa.Integer(), nullable=False),
        sa.Column('academic_year', sa.Text(), nullable=False),
        sa.Column('entered_by', sa.String(36), nullable=False),
        sa.Column('entered_at', sa.Text(), nullable=False),
        sa.Column('updated_by', sa.String(36), nullable=True),
        sa.Column('updated_at', sa.Text(), nullable=True),
        sa.UniqueConstraint('student_id', 'subject_name', 'semester', 'academic_year',
                            name='uq_score_entries_term'),
    )
    op.create_index('ix_score_entries_term', 'score_entries', ['semester', 'academic_year'])

    # ── Reference Data ────────────────────────────────────────
    op.create_table(
        'subjects',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('weight', sa.Float(), nullable=False, server_default='1.0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.Text(), nullable=False),
    )

    op.create_table(
        'classes',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('grade', sa.Text(), nullable=False),
        sa.Column('academic_year', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.Text(), nullable=False),
    )

    op.create_table(
        'academic_years',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('name', sa.Text(), nullable=False, unique=True),
        sa.Column('start_date', sa.Text(), nullable=False),
        sa.Column('end_date', sa.Text(), nullable=False),
        sa.Column('is_current', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.Text(), nullable=False),
    )

    op.create_table(
        'academic_criteria',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('level', sa.Text(), nullable=False, unique=True),
        sa.Column('min_gpa', sa.Float(), nullable=False),
        sa.Column('max_gpa', sa.Float(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.Text(), nullable=False),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    op.drop_table('academic_criteria')
    op.drop_table('academic_years')
    op.drop_table('classes')
    op.drop_table('subjects')
    op.drop_index('ix_score_entries_term', table_name='score_entries')
    op.drop_table('score_entries')
    op.drop_table('teacher_profiles')
    op.drop_table('student_profiles')
    op.drop_table('accounts')
