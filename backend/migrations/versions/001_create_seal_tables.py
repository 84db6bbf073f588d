"""Create users, seals and seal application tables

Revision ID: 001
Revises:
Create Date: 2024-03-01 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('real_name', sa.String(100), nullable=True),
        sa.Column('password', sa.String(255), nullable=False),
        sa.Column('email', sa.String(100), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('role', sa.String(20), server_default='USER', nullable=False),
        sa.Column('status', sa.String(20), server_default='ACTIVE', nullable=False),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('login_count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('create_time', sa.DateTime(), nullable=False),
        sa.Column('update_time', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.CheckConstraint("role IN ('ADMIN', 'MANAGER', 'USER')", name='ck_users_role'),
        sa.CheckConstraint("status IN ('ACTIVE', 'INACTIVE', 'PENDING')", name='ck_users_status')
    )

    # Creation applications come first: seals reference the application that minted them
    op.create_table(
        'seal_create_applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_no', sa.String(50), nullable=False),
        sa.Column('seal_name', sa.String(100), nullable=False),
        sa.Column('seal_type', sa.String(20), nullable=False),
        sa.Column('seal_shape', sa.String(20), nullable=False),
        sa.Column('owner_department', sa.String(100), nullable=False),
        sa.Column('keeper_department', sa.String(100), nullable=False),
        sa.Column('keeper', sa.String(50), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('applicant', sa.String(50), nullable=False),
        sa.Column('applicant_department', sa.String(100), nullable=False),
        sa.Column('status', sa.String(20), server_default='PENDING', nullable=False),
        sa.Column('approver', sa.String(50), nullable=True),
        sa.Column('approve_time', sa.DateTime(), nullable=True),
        sa.Column('approve_remark', sa.String(500), nullable=True),
        sa.Column('apply_time', sa.DateTime(), nullable=False),
        sa.Column('update_time', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_no'),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED')",
            name='ck_seal_create_applications_status'
        )
    )
    op.create_index('ix_seal_create_applications_status', 'seal_create_applications', ['status'])
    op.create_index('ix_seal_create_applications_applicant', 'seal_create_applications', ['applicant'])

    op.create_table(
        'seals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('shape', sa.String(20), nullable=True),
        sa.Column('status', sa.String(20), server_default='IN_USE', nullable=False),
        sa.Column('owner_department', sa.String(100), nullable=True),
        sa.Column('keeper_department', sa.String(100), nullable=True),
        sa.Column('keeper', sa.String(100), nullable=True),
        sa.Column('keeper_phone', sa.String(20), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_url', sa.String(255), nullable=True),
        sa.Column('source_application_id', sa.Integer(), nullable=True),
        sa.Column('create_time', sa.DateTime(), nullable=False),
        sa.Column('update_time', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
        sa.UniqueConstraint('source_application_id'),
        sa.ForeignKeyConstraint(
            ['source_application_id'], ['seal_create_applications.id'], ondelete='SET NULL'
        ),
        sa.CheckConstraint(
            "status IN ('IN_USE', 'DESTROYED', 'LOST', 'SUSPENDED')",
            name='ck_seals_status'
        )
    )
    op.create_index('ix_seals_keeper', 'seals', ['keeper'])
    op.create_index('ix_seals_status', 'seals', ['status'])

    op.create_table(
        'seal_applications',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_no', sa.String(50), nullable=False),
        sa.Column('seal_name', sa.String(100), nullable=False),
        sa.Column('seal_type', sa.String(20), nullable=False),
        sa.Column('seal_shape', sa.String(20), nullable=True),
        sa.Column('seal_owner_department', sa.String(100), nullable=True),
        sa.Column('seal_keeper_department', sa.String(100), nullable=True),
        sa.Column('applicant', sa.String(100), nullable=False),
        sa.Column('department', sa.String(100), nullable=False),
        sa.Column('file_name', sa.String(200), nullable=True),
        sa.Column('addressee', sa.String(200), nullable=True),
        sa.Column('copies', sa.Integer(), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=False),
        sa.Column('attachment_url', sa.String(500), nullable=True),
        sa.Column('attachment_name', sa.String(500), nullable=True),
        sa.Column('documents', sa.String(500), nullable=True),
        sa.Column('expected_time', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(20), server_default='PENDING', nullable=False),
        sa.Column('approver', sa.String(100), nullable=True),
        sa.Column('approve_time', sa.DateTime(), nullable=True),
        sa.Column('approve_remark', sa.Text(), nullable=True),
        sa.Column('apply_time', sa.DateTime(), nullable=False),
        sa.Column('update_time', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('application_no'),
        sa.CheckConstraint(
            "status IN ('PENDING', 'APPROVED', 'REJECTED', 'COMPLETED')",
            name='ck_seal_applications_status'
        )
    )
    op.create_index('ix_seal_applications_status', 'seal_applications', ['status'])
    op.create_index('ix_seal_applications_applicant', 'seal_applications', ['applicant'])
    op.create_index('ix_seal_applications_apply_time', 'seal_applications', ['apply_time'])


def downgrade():
    op.drop_index('ix_seal_applications_apply_time', table_name='seal_applications')
    op.drop_index('ix_seal_applications_applicant', table_name='seal_applications')
    op.drop_index('ix_seal_applications_status', table_name='seal_applications')
    op.drop_table('seal_applications')

    op.drop_index('ix_seals_status', table_name='seals')
    op.drop_index('ix_seals_keeper', table_name='seals')
    op.drop_table('seals')

    op.drop_index('ix_seal_create_applications_applicant', table_name='seal_create_applications')
    op.drop_index('ix_seal_create_applications_status', table_name='seal_create_applications')
    op.drop_table('seal_create_applications')

    op.drop_table('users')
