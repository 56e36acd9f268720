"""initial schema: users, values, activities, instances, friends, locations, logs

Revision ID: 0f1a2b3c4d5e
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0f1a2b3c4d5e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> sa.Column:
    return sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()'))


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    ]


def _owner() -> sa.Column:
    return sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)


def upgrade() -> None:
    # ─── users ───
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, server_default='USER'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('preferences', sa.JSON, nullable=True),
        sa.Column('google_api_key', sa.Text, nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # ─── core_values ───
    op.create_table(
        'core_values',
        _id(),
        _owner(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_core_values_user_id', 'core_values', ['user_id'])

    # ─── activities ───
    op.create_table(
        'activities',
        _id(),
        _owner(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_activities_user_id', 'activities', ['user_id'])

    op.create_table(
        'activity_values',
        _id(),
        sa.Column('activity_id', UUID(as_uuid=True), sa.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value_id', UUID(as_uuid=True), sa.ForeignKey('core_values.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('activity_id', 'value_id', name='uq_activity_value'),
    )
    op.create_index('ix_activity_values_activity_id', 'activity_values', ['activity_id'])
    op.create_index('ix_activity_values_value_id', 'activity_values', ['value_id'])

    # ─── friends ───
    op.create_table(
        'friends',
        _id(),
        _owner(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('group', sa.String(255), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_friends_user_id', 'friends', ['user_id'])
    op.create_index('ix_friends_name', 'friends', ['name'])
    op.create_index('ix_friends_group', 'friends', ['group'])

    # ─── activity_instances ───
    op.create_table(
        'activity_instances',
        _id(),
        _owner(),
        sa.Column('activity_id', UUID(as_uuid=True), sa.ForeignKey('activities.id', ondelete='CASCADE'), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('ends_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_all_day', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('location', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('allow_external_guests', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('custom_title', sa.String(255), nullable=True),
        sa.Column('venue', sa.String(255), nullable=True),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('zip_code', sa.String(20), nullable=True),
        sa.Column('detailed_description', sa.Text, nullable=True),
        sa.Column('requirements', sa.Text, nullable=True),
        sa.Column('contact_info', sa.String(500), nullable=True),
        sa.Column('venue_type', sa.String(20), nullable=True),
        sa.Column('price_info', sa.String(255), nullable=True),
        sa.Column('capacity', sa.Integer, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_activity_instances_user_id', 'activity_instances', ['user_id'])
    op.create_index('ix_activity_instances_activity_id', 'activity_instances', ['activity_id'])
    op.create_index('ix_activity_instances_starts_at', 'activity_instances', ['starts_at'])

    op.create_table(
        'participations',
        _id(),
        sa.Column('instance_id', UUID(as_uuid=True), sa.ForeignKey('activity_instances.id', ondelete='CASCADE'), nullable=False),
        sa.Column('friend_id', UUID(as_uuid=True), sa.ForeignKey('friends.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='INVITED'),
        sa.Column('invite_token', sa.String(64), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_participations_instance_id', 'participations', ['instance_id'])
    op.create_index('ix_participations_friend_id', 'participations', ['friend_id'])
    op.create_index('ix_participations_invite_token', 'participations', ['invite_token'], unique=True)

    op.create_table(
        'public_rsvps',
        _id(),
        sa.Column('instance_id', UUID(as_uuid=True), sa.ForeignKey('activity_instances.id', ondelete='CASCADE'), nullable=False),
        sa.Column('friend_id', UUID(as_uuid=True), sa.ForeignKey('friends.id', ondelete='SET NULL'), nullable=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('message', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_public_rsvps_instance_id', 'public_rsvps', ['instance_id'])
    op.create_index('ix_public_rsvps_friend_id', 'public_rsvps', ['friend_id'])

    # ─── locations ───
    op.create_table(
        'locations',
        _id(),
        _owner(),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(50), nullable=False, server_default='Venue'),
        sa.Column('address', sa.String(500), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('website', sa.String(500), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_locations_user_id', 'locations', ['user_id'])

    # ─── audit_logs / ai_call_logs ───
    op.create_table(
        'audit_logs',
        _id(),
        sa.Column('actor_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('actor_email', sa.String(255), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(100), nullable=False),
        sa.Column('entity_id', UUID(as_uuid=True), nullable=True),
        sa.Column('before_state', sa.Text, nullable=True),
        sa.Column('after_state', sa.Text, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])

    op.create_table(
        'ai_call_logs',
        _id(),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('call_type', sa.String(100), nullable=False),
        sa.Column('model', sa.String(100), nullable=False),
        sa.Column('prompt_tokens', sa.Integer, nullable=True),
        sa.Column('completion_tokens', sa.Integer, nullable=True),
        sa.Column('latency_ms', sa.Integer, nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='success'),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('request_json', sa.Text, nullable=True),
        sa.Column('response_json', sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_ai_call_logs_user_id', 'ai_call_logs', ['user_id'])


def downgrade() -> None:
    op.drop_table('ai_call_logs')
    op.drop_table('audit_logs')
    op.drop_table('locations')
    op.drop_table('public_rsvps')
    op.drop_table('participations')
    op.drop_table('activity_instances')
    op.drop_table('friends')
    op.drop_table('activity_values')
    op.drop_table('activities')
    op.drop_table('core_values')
    op.drop_table('users')
