"""initial tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(16), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table('groups',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
    )
    op.create_index('ix_groups_name', 'groups', ['name'], unique=True)

    op.create_table('courses',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
    )
    op.create_index('ix_courses_name', 'courses', ['name'])

    op.create_table('students',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('date_of_birth', sa.String(10), nullable=False),
        sa.Column('order_number', sa.String(20), nullable=False),
        sa.Column('edebo_id', sa.String(8), nullable=False),
        sa.Column('is_full_time', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True, unique=True),
    )
    op.create_index('ix_students_group_id', 'students', ['group_id'])

    op.create_table('grades',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('grade', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_grades_student_course', 'grades', ['student_id', 'course_id'])

    op.create_table('grades_history',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_changed_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('grade', sa.Integer(), nullable=False),
        sa.Column('reason_of_change', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_grades_history_student_id', 'grades_history', ['student_id'])
    op.create_index('ix_grades_history_course_id', 'grades_history', ['course_id'])

    op.create_table('votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_votes_start_date', 'votes', ['start_date'])
    op.create_index('ix_votes_end_date', 'votes', ['end_date'])

    op.create_table('student_courses',
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table('student_votes',
        sa.Column('student_id', sa.Integer(), sa.ForeignKey('students.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('vote_id', sa.Integer(), sa.ForeignKey('votes.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table('vote_groups',
        sa.Column('vote_id', sa.Integer(), sa.ForeignKey('votes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('group_id', sa.Integer(), sa.ForeignKey('groups.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table('vote_required_courses',
        sa.Column('vote_id', sa.Integer(), sa.ForeignKey('votes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table('vote_not_required_courses',
        sa.Column('vote_id', sa.Integer(), sa.ForeignKey('votes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('course_id', sa.Integer(), sa.ForeignKey('courses.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

def downgrade():
    op.drop_table('audit_logs')
    op.drop_table('vote_not_required_courses')
    op.drop_table('vote_required_courses')
    op.drop_table('vote_groups')
    op.drop_table('student_votes')
    op.drop_table('student_courses')
    op.drop_table('votes')
    op.drop_table('grades_history')
    op.drop_table('grades')
    op.drop_table('students')
    op.drop_table('courses')
    op.drop_table('groups')
    op.drop_table('users')
