"""charger alerts tables

Revision ID: 7c1e4a2b9d30
Revises:
Create Date: 2026-10-18 09:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers, used by Alembic.
revision = '7c1e4a2b9d30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'user_plates',
        sa.Column('id', sa.String(), primary_key=True, server_default=sa.text('gen_random_uuid()::text')),
        sa.Column('plate', sa.String(32), nullable=False),
        sa.Column('user_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_user_plates_plate', 'user_plates', ['plate'], unique=True)
    op.create_index('ix_user_plates_user_id', 'user_plates', ['user_id'])

    op.create_table(
        'charger_usage',
        sa.Column('id', sa.String(), primary_key=True, server_default=sa.text('gen_random_uuid()::text')),
        sa.Column('image_url', sa.String(), nullable=False),
        sa.Column('charger_id', sa.String()),
        sa.Column('location', sa.String()),
        sa.Column('reported_by', sa.String()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'alerts',
        sa.Column('id', sa.String(), primary_key=True, server_default=sa.text('gen_random_uuid()::text')),
        sa.Column('recipient_id', sa.String(), nullable=False),
        sa.Column('recipient_plate', sa.String(32), nullable=False),
        sa.Column('plate', sa.String(32), nullable=False),
        sa.Column('location', sa.String()),
        sa.Column('charger_id', sa.String()),
        sa.Column('reported_by', sa.String()),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('public_image_url', sa.Text(), nullable=False),
        sa.Column('confidence', sa.Float()),
        sa.Column('detection_timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('notification_method', sa.String(20)),
        sa.Column('topic', sa.String(100)),
        sa.Column('message_id', sa.String()),
        sa.Column('dispatch_error', sa.Text()),
        sa.Column('source_event_id', sa.String()),
    )
    op.create_index('ix_alerts_recipient_id', 'alerts', ['recipient_id'])
    op.create_index('ix_alerts_source_event_id', 'alerts', ['source_event_id'])

    op.create_table(
        'unregistered_plates',
        sa.Column('id', sa.String(), primary_key=True, server_default=sa.text('gen_random_uuid()::text')),
        sa.Column('plate', sa.String(32), nullable=False),
        sa.Column('image_url', sa.Text(), nullable=False),
        sa.Column('location', sa.String()),
        sa.Column('charger_id', sa.String()),
        sa.Column('reported_by', sa.String()),
        sa.Column('confidence', sa.Float()),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('source_event_id', sa.String()),
    )
    op.create_index('ix_unregistered_plates_plate', 'unregistered_plates', ['plate'])
    op.create_index('ix_unregistered_plates_source_event_id', 'unregistered_plates', ['source_event_id'])

    op.create_table(
        'failed_detections',
        sa.Column('id', sa.String(), primary_key=True, server_default=sa.text('gen_random_uuid()::text')),
        sa.Column('image_url', sa.Text()),
        sa.Column('charger_id', sa.String()),
        sa.Column('location', sa.String()),
        sa.Column('error', sa.Text(), nullable=False),
        sa.Column('error_details', JSONB()),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('source_event_id', sa.String()),
    )
    op.create_index('ix_failed_detections_source_event_id', 'failed_detections', ['source_event_id'])

    op.create_table(
        'subscriptions',
        sa.Column('user_id', sa.String(), primary_key=True),
        sa.Column('topic', sa.String(100), nullable=False),
        sa.Column('token', sa.Text()),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('subscribed_at', sa.DateTime(timezone=True)),
        sa.Column('unsubscribed_at', sa.DateTime(timezone=True)),
    )


def downgrade() -> None:
    op.drop_table('subscriptions')
    op.drop_table('failed_detections')
    op.drop_table('unregistered_plates')
    op.drop_table('alerts')
    op.drop_table('charger_usage')
    op.drop_table('user_plates')
