"""Create jobs, candidate_profiles, applications and poke_records tables

Revision ID: 001_create_jobboard_tables
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '001_create_jobboard_tables'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    """Create job board tables."""
    op.create_table(
        'jobs',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('vendor_id', sa.String(length=100), nullable=False),
        sa.Column('vendor_email', sa.String(length=255), nullable=False),
        sa.Column('recruiter_name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('recruiter_phone', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('location', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('job_country', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('job_state', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('job_city', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('job_type', sa.String(length=50), nullable=False, server_default='full_time'),
        sa.Column('job_sub_type', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('work_mode', sa.String(length=20), nullable=False, server_default=''),
        sa.Column('salary_min', sa.Float(), nullable=True),
        sa.Column('salary_max', sa.Float(), nullable=True),
        sa.Column('pay_per_hour', sa.Float(), nullable=True),
        sa.Column('skills_required', sa.JSON(), nullable=False),
        sa.Column('experience_required', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_jobs_title', 'jobs', ['title'])
    op.create_index('idx_job_active_created', 'jobs', ['is_active', 'created_at'])
    op.create_index('idx_job_vendor_created', 'jobs', ['vendor_id', 'created_at'])
    op.create_index('idx_job_active_type_created', 'jobs', ['is_active', 'job_type', 'created_at'])
    op.create_index('idx_job_active_country_created', 'jobs', ['is_active', 'job_country', 'created_at'])

    op.create_table(
        'candidate_profiles',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('candidate_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('phone', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('username', sa.String(length=100), nullable=True),
        sa.Column('current_company', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('current_role', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('location', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('profile_country', sa.String(length=100), nullable=True),
        sa.Column('preferred_job_type', sa.String(length=50), nullable=False, server_default=''),
        sa.Column('expected_hourly_rate', sa.Float(), nullable=True),
        sa.Column('visibility_config', sa.JSON(), nullable=False),
        sa.Column('experience_years', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('bio', sa.Text(), nullable=False, server_default=''),
        sa.Column('resume_summary', sa.Text(), nullable=False, server_default=''),
        sa.Column('resume_experience', sa.Text(), nullable=False, server_default=''),
        sa.Column('resume_education', sa.Text(), nullable=False, server_default=''),
        sa.Column('resume_achievements', sa.Text(), nullable=False, server_default=''),
        sa.Column('lock_state', sa.String(length=20), nullable=False, server_default='unlocked'),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username', name='uq_candidate_profiles_username'),
    )
    op.create_index('ix_candidate_profiles_candidate_id', 'candidate_profiles', ['candidate_id'], unique=True)
    op.create_index('ix_candidate_profiles_profile_country', 'candidate_profiles', ['profile_country'])

    op.create_table(
        'applications',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('job_id', sa.BigInteger(), nullable=False),
        sa.Column('job_title', sa.String(length=255), nullable=False),
        sa.Column('candidate_id', sa.String(length=100), nullable=False),
        sa.Column('candidate_email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('cover_letter', sa.Text(), nullable=False, server_default=''),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('job_id', 'candidate_id', name='uq_application_job_candidate'),
    )
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])
    op.create_index('ix_applications_candidate_id', 'applications', ['candidate_id'])
    op.create_index('idx_application_candidate_created', 'applications', ['candidate_id', 'created_at'])

    op.create_table(
        'poke_records',
        sa.Column('id', sa.BigInteger(), nullable=False, autoincrement=True),
        sa.Column('sender_id', sa.String(length=100), nullable=False),
        sa.Column('sender_name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('sender_email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('sender_type', sa.String(length=20), nullable=False),
        sa.Column('target_id', sa.String(length=100), nullable=False),
        sa.Column('target_vendor_id', sa.String(length=100), nullable=True),
        sa.Column('target_candidate_id', sa.String(length=100), nullable=True),
        sa.Column('target_email', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('target_name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('subject', sa.String(length=300), nullable=False, server_default=''),
        sa.Column('is_email', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('job_id', sa.String(length=100), nullable=True),
        sa.Column('job_title', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('sender_id', 'target_id', 'is_email', name='uq_poke_sender_target_kind'),
    )
    op.create_index('ix_poke_records_sender_id', 'poke_records', ['sender_id'])
    op.create_index('ix_poke_records_target_id', 'poke_records', ['target_id'])
    op.create_index('ix_poke_records_target_vendor_id', 'poke_records', ['target_vendor_id'])
    op.create_index('ix_poke_records_target_candidate_id', 'poke_records', ['target_candidate_id'])
    op.create_index('idx_poke_sender_created', 'poke_records', ['sender_id', 'created_at'])


def downgrade() -> None:
    """Drop job board tables."""
    op.drop_table('poke_records')
    op.drop_table('applications')
    op.drop_table('candidate_profiles')
    op.drop_table('jobs')
