"""initial_schema

Revision ID: 3c1f9a2d7e10
Revises:
Create Date: 2026-02-02 10:12:41.532118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3c1f9a2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


ENUMS = {
    'userstatus': ('active', 'inactive'),
    'areavisibility': ('PUBLIC', 'PRIVATE_SHAREABLE', 'PRIVATE'),
    'memberrole': ('ADMIN', 'MEMBER'),
    'invitationstatus': ('PENDING', 'ACCEPTED', 'REJECTED'),
    'invitationtype': ('INVITATION', 'JOIN_REQUEST'),
    'devicetype': ('GPS_TRACKER', 'TAGGED_OBJECT'),
    'eventtype': ('THEFT', 'LOST', 'ACCIDENT', 'FIRE', 'GENERAL'),
    'eventstatus': ('IN_PROGRESS', 'CLOSED'),
    'chatstatus': ('ACTIVE', 'RESOLVED', 'CLOSED'),
    'messagesender': ('FINDER', 'OWNER'),
}


def _enum(name: str) -> sa.Enum:
    # PostgreSQL types are created once up front; memberrole is shared by two tables.
    values = ENUMS[name]
    return sa.Enum(*values, name=name).with_variant(
        postgresql.ENUM(*values, name=name, create_type=False), 'postgresql'
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name, values in ENUMS.items():
            postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('external_id', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('first_name', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('last_name', sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column('status', _enum('userstatus'), nullable=False),
        sa.Column('show_name', sa.Boolean(), nullable=False),
        sa.Column('show_email', sa.Boolean(), nullable=False),
        sa.Column('show_public_events', sa.Boolean(), nullable=False),
        sa.Column('default_area_latitude', sa.Float(), nullable=True),
        sa.Column('default_area_longitude', sa.Float(), nullable=True),
        sa.Column('default_area_radius', sa.Float(), nullable=True),
        sa.Column('push_token', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_external_id', 'users', ['external_id'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'areas_of_interest',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('radius', sa.Float(), nullable=False),
        sa.Column('visibility', _enum('areavisibility'), nullable=False),
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_areas_of_interest_name', 'areas_of_interest', ['name'])
    op.create_index('ix_areas_of_interest_visibility', 'areas_of_interest', ['visibility'])
    op.create_index('ix_areas_of_interest_creator_id', 'areas_of_interest', ['creator_id'])

    op.create_table(
        'area_memberships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('area_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', _enum('memberrole'), nullable=False),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False),
        sa.Column('new_events_count', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['area_id'], ['areas_of_interest.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('area_id', 'user_id'),
    )
    op.create_index('ix_area_memberships_area_id', 'area_memberships', ['area_id'])
    op.create_index('ix_area_memberships_user_id', 'area_memberships', ['user_id'])

    op.create_table(
        'area_invitations',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('area_id', sa.Uuid(), nullable=False),
        sa.Column('sender_id', sa.Uuid(), nullable=False),
        sa.Column('receiver_id', sa.Uuid(), nullable=True),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('type', _enum('invitationtype'), nullable=False),
        sa.Column('status', _enum('invitationstatus'), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['area_id'], ['areas_of_interest.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['sender_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['receiver_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_area_invitations_area_id', 'area_invitations', ['area_id'])
    op.create_index('ix_area_invitations_sender_id', 'area_invitations', ['sender_id'])
    op.create_index('ix_area_invitations_receiver_id', 'area_invitations', ['receiver_id'])
    op.create_index('ix_area_invitations_email', 'area_invitations', ['email'])
    op.create_index('ix_area_invitations_status', 'area_invitations', ['status'])
    op.create_index(
        'uq_area_invitations_pending_join_request',
        'area_invitations',
        ['area_id', 'sender_id'],
        unique=True,
        sqlite_where=sa.text("status = 'PENDING' AND type = 'JOIN_REQUEST'"),
        postgresql_where=sa.text("status = 'PENDING' AND type = 'JOIN_REQUEST'"),
    )

    op.create_table(
        'groups',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column('creator_id', sa.Uuid(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['creator_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_groups_creator_id', 'groups', ['creator_id'])

    op.create_table(
        'group_memberships',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('group_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('role', _enum('memberrole'), nullable=False),
        sa.Column('location_sharing_enabled', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_id', 'user_id'),
    )
    op.create_index('ix_group_memberships_group_id', 'group_memberships', ['group_id'])
    op.create_index('ix_group_memberships_user_id', 'group_memberships', ['user_id'])

    op.create_table(
        'devices',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=True),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('type', _enum('devicetype'), nullable=False),
        sa.Column('imei', sqlmodel.sql.sqltypes.AutoString(length=32), nullable=True),
        sa.Column('qr_code', sqlmodel.sql.sqltypes.AutoString(), nullable=False),
        sa.Column('qr_enabled', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('imei'),
    )
    op.create_index('ix_devices_user_id', 'devices', ['user_id'])
    op.create_index('ix_devices_type', 'devices', ['type'])
    op.create_index('ix_devices_qr_code', 'devices', ['qr_code'], unique=True)

    op.create_table(
        'positions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('device_id', sa.Uuid(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('altitude', sa.Float(), nullable=True),
        sa.Column('speed', sa.Float(), nullable=True),
        sa.Column('heading', sa.Float(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_positions_device_id', 'positions', ['device_id'])
    op.create_index('ix_positions_created_at', 'positions', ['created_at'])

    op.create_table(
        'phone_devices',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_position_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_phone_devices_user_id', 'phone_devices', ['user_id'], unique=True)

    op.create_table(
        'phone_positions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('phone_device_id', sa.Uuid(), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('altitude', sa.Float(), nullable=True),
        sa.Column('speed', sa.Float(), nullable=True),
        sa.Column('heading', sa.Float(), nullable=True),
        sa.Column('accuracy', sa.Float(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['phone_device_id'], ['phone_devices.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_phone_positions_phone_device_id', 'phone_positions', ['phone_device_id'])
    op.create_index('ix_phone_positions_created_at', 'phone_positions', ['created_at'])

    op.create_table(
        'events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('type', _enum('eventtype'), nullable=False),
        sa.Column('status', _enum('eventstatus'), nullable=False),
        sa.Column('description', sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False),
        sa.Column('is_urgent', sa.Boolean(), nullable=False),
        sa.Column('real_time_tracking', sa.Boolean(), nullable=False),
        sa.Column('group_id', sa.Uuid(), nullable=True),
        sa.Column('device_id', sa.Uuid(), nullable=True),
        sa.Column('phone_device_id', sa.Uuid(), nullable=True),
        sa.Column('closed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['phone_device_id'], ['phone_devices.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_events_author_id', 'events', ['author_id'])
    op.create_index('ix_events_type', 'events', ['type'])
    op.create_index('ix_events_status', 'events', ['status'])
    op.create_index('ix_events_latitude', 'events', ['latitude'])
    op.create_index('ix_events_longitude', 'events', ['longitude'])
    op.create_index('ix_events_is_public', 'events', ['is_public'])
    op.create_index('ix_events_group_id', 'events', ['group_id'])
    op.create_index('ix_events_device_id', 'events', ['device_id'])

    op.create_table(
        'found_object_chats',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('device_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('finder_id', sa.Uuid(), nullable=True),
        sa.Column('finder_session_id', sqlmodel.sql.sqltypes.AutoString(length=64), nullable=False),
        sa.Column('finder_name', sqlmodel.sql.sqltypes.AutoString(length=80), nullable=True),
        sa.Column('status', _enum('chatstatus'), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['device_id'], ['devices.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['finder_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_found_object_chats_device_id', 'found_object_chats', ['device_id'])
    op.create_index('ix_found_object_chats_owner_id', 'found_object_chats', ['owner_id'])
    op.create_index('ix_found_object_chats_finder_id', 'found_object_chats', ['finder_id'])
    op.create_index('ix_found_object_chats_finder_session_id', 'found_object_chats', ['finder_session_id'])
    op.create_index('ix_found_object_chats_status', 'found_object_chats', ['status'])
    op.create_index(
        'uq_found_object_chats_active_session',
        'found_object_chats',
        ['device_id', 'finder_session_id'],
        unique=True,
        sqlite_where=sa.text("status = 'ACTIVE'"),
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    op.create_table(
        'found_object_messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('chat_id', sa.Uuid(), nullable=False),
        sa.Column('sender', _enum('messagesender'), nullable=False),
        sa.Column('content', sqlmodel.sql.sqltypes.AutoString(length=2000), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['chat_id'], ['found_object_chats.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_found_object_messages_chat_id', 'found_object_messages', ['chat_id'])
    op.create_index('ix_found_object_messages_created_at', 'found_object_messages', ['created_at'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'found_object_messages',
        'found_object_chats',
        'events',
        'phone_positions',
        'phone_devices',
        'positions',
        'devices',
        'group_memberships',
        'groups',
        'area_invitations',
        'area_memberships',
        'areas_of_interest',
        'users',
    ):
        op.drop_table(table)

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ENUMS:
            postgresql.ENUM(name=name).drop(bind, checkfirst=True)
