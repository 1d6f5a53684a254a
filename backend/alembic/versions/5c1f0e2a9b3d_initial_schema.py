"""Initial schema: users, workspaces, memberships, projects, work items, notifications

Revision ID: 5c1f0e2a9b3d
Revises:
Create Date: 2026-10-17 09:12:40.118204

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '5c1f0e2a9b3d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _enum(name: str, *values: str) -> sa.Enum:
    return sa.Enum(*values, name=name, native_enum=False, length=20)


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column('email', sa.String(255), nullable=False, comment="User's email address (unique, lower case)"),
        sa.Column('display_name', sa.String(255), nullable=False, comment="User's display name"),
        sa.Column('hashed_password', sa.String(255), nullable=False, comment='Salted bcrypt hash'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'workspaces',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column('name', sa.String(255), nullable=False, comment='Workspace name'),
        sa.Column('slug', sa.String(255), nullable=False, comment='URL slug (unique)'),
        sa.Column('owner_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
                  comment='ID of the workspace owner'),
    )
    op.create_index('ix_workspaces_slug', 'workspaces', ['slug'], unique=True)

    op.create_table(
        'memberships',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column('workspace_id', sa.Uuid(), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False,
                  comment='ID of the workspace'),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
                  comment='ID of the user'),
        sa.Column('role', _enum('workspacerole', 'ADMIN', 'MEMBER', 'VIEWER'), nullable=False,
                  comment='Role of the user in the workspace'),
        sa.UniqueConstraint('workspace_id', 'user_id', name='uq_membership_workspace_user'),
    )
    op.create_index('ix_memberships_workspace_id', 'memberships', ['workspace_id'])
    op.create_index('ix_memberships_user_id', 'memberships', ['user_id'])

    op.create_table(
        'projects',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column('name', sa.String(255), nullable=False, comment='Project name'),
        sa.Column('description', sa.Text(), nullable=True, comment='Project description'),
        sa.Column('workspace_id', sa.Uuid(), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False,
                  comment='ID of the owning workspace'),
        sa.Column('creator_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
                  comment='ID of the user who created the project'),
    )
    op.create_index('ix_projects_workspace_id', 'projects', ['workspace_id'])

    op.create_table(
        'work_items',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column('title', sa.String(500), nullable=False, comment='Work item title'),
        sa.Column('description', sa.Text(), nullable=True, comment='Work item description'),
        sa.Column('status', _enum('workitemstatus', 'BACKLOG', 'TODO', 'IN_PROGRESS', 'DONE'), nullable=False),
        sa.Column('priority', _enum('workitempriority', 'LOW', 'MEDIUM', 'HIGH', 'URGENT'), nullable=False),
        sa.Column('type', _enum('workitemtype', 'TASK', 'BUG', 'EPIC'), nullable=False),
        sa.Column('position', sa.Float(), nullable=False, comment='Fractional sort key within the project'),
        sa.Column('project_id', sa.Uuid(), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False,
                  comment='ID of the owning project'),
        sa.Column('creator_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
                  comment='ID of the user who created the work item'),
        sa.Column('assignee_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
                  comment='ID of the assigned user'),
        sa.UniqueConstraint('project_id', 'position', name='uq_work_item_project_position'),
    )
    op.create_index('ix_work_items_project_id', 'work_items', ['project_id'])
    op.create_index('ix_work_items_assignee_id', 'work_items', ['assignee_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True, nullable=False),
        *_timestamps(),
        sa.Column('recipient_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False,
                  comment='ID of the recipient user'),
        sa.Column('type', _enum('notificationtype', 'INVITE', 'UPDATE'), nullable=False),
        sa.Column('workspace_id', sa.Uuid(), sa.ForeignKey('workspaces.id', ondelete='CASCADE'), nullable=False,
                  comment='Workspace the notification is about'),
        sa.Column('project_name', sa.String(255), nullable=True, comment='Project name for work item alerts'),
        sa.Column('reference_id', sa.String(64), nullable=True,
                  comment='Workspace id for invites, work item id for alerts'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('subtitle', sa.String(500), nullable=False),
        sa.Column('is_unread', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
    op.create_index('ix_notifications_workspace_id', 'notifications', ['workspace_id'])
    op.create_index(
        'uq_notification_pending_invite',
        'notifications',
        ['recipient_id', 'workspace_id'],
        unique=True,
        sqlite_where=sa.text("type = 'INVITE'"),
        postgresql_where=sa.text("type = 'INVITE'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_notification_pending_invite', table_name='notifications')
    op.drop_index('ix_notifications_workspace_id', table_name='notifications')
    op.drop_index('ix_notifications_recipient_id', table_name='notifications')
    op.drop_table('notifications')

    op.drop_index('ix_work_items_assignee_id', table_name='work_items')
    op.drop_index('ix_work_items_project_id', table_name='work_items')
    op.drop_table('work_items')

    op.drop_index('ix_projects_workspace_id', table_name='projects')
    op.drop_table('projects')

    op.drop_index('ix_memberships_user_id', table_name='memberships')
    op.drop_index('ix_memberships_workspace_id', table_name='memberships')
    op.drop_table('memberships')

    op.drop_index('ix_workspaces_slug', table_name='workspaces')
    op.drop_table('workspaces')

    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
