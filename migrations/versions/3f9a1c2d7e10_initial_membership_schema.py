"""Initial membership schema: zones, members, payments, events, attendances, notifications"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f9a1c2d7e10'
down_revision = None
branch_labels = None
depends_on = None


def timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade():
    op.create_table(
        'zones',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
    )

    op.create_table(
        'members',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.String(length=20), nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=False),
        sa.Column('last_name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('membership_type', sa.Enum('basic', 'premium', 'vip', 'lifetime',
                                             name='membership_type'), nullable=False),
        sa.Column('status', sa.Enum('active', 'inactive', 'suspended', 'expired',
                                    name='member_status'), nullable=False),
        sa.Column('join_date', sa.Date(), nullable=False),
        sa.Column('expiry_date', sa.Date(), nullable=False),
        sa.Column('zone_id', sa.Integer(), sa.ForeignKey('zones.id'), nullable=False),
        sa.Column('profile_image', sa.String(length=255), nullable=True),
        sa.Column('qr_code', sa.Text(), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
        sa.UniqueConstraint('member_id'),
        sa.UniqueConstraint('email'),
    )
    with op.batch_alter_table('members', schema=None) as batch_op:
        batch_op.create_index('ix_members_phone', ['phone'], unique=False)
        batch_op.create_index('ix_members_zone_id', ['zone_id'], unique=False)
        batch_op.create_index('idx_member_status_expiry', ['status', 'expiry_date'], unique=False)

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('amount', sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column('payment_type', sa.Enum('membership_fee', 'renewal', 'donation', 'event_fee',
                                          name='payment_type'), nullable=False),
        sa.Column('payment_method', sa.Enum('cash', 'card', 'bank_transfer', 'online',
                                            name='payment_method'), nullable=False),
        sa.Column('status', sa.Enum('pending', 'completed', 'failed', 'refunded',
                                    name='payment_status'), nullable=False),
        sa.Column('transaction_id', sa.String(length=100), nullable=True),
        sa.Column('receipt_url', sa.String(length=255), nullable=True),
        sa.Column('payment_date', sa.DateTime(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
        sa.UniqueConstraint('transaction_id'),
        sa.CheckConstraint('amount >= 0', name='ck_payments_amount_non_negative'),
    )
    with op.batch_alter_table('payments', schema=None) as batch_op:
        batch_op.create_index('ix_payments_member_id', ['member_id'], unique=False)
        batch_op.create_index('idx_payment_status_date', ['status', 'payment_date'], unique=False)

    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('event_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('event_type', sa.Enum('meeting', 'workshop', 'social', 'training', 'conference',
                                        name='event_type'), nullable=False),
        sa.Column('max_attendees', sa.Integer(), nullable=True),
        sa.Column('registration_fee', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('status', sa.Enum('upcoming', 'ongoing', 'completed', 'cancelled',
                                    name='event_status'), nullable=False),
        sa.Column('image_url', sa.String(length=255), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
    )
    with op.batch_alter_table('events', schema=None) as batch_op:
        batch_op.create_index('ix_events_event_date', ['event_date'], unique=False)

    op.create_table(
        'event_attendances',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=False),
        sa.Column('status', sa.Enum('registered', 'attended', 'no_show', 'cancelled',
                                    name='attendance_status'), nullable=False),
        sa.Column('registration_date', sa.DateTime(), nullable=False),
        sa.Column('attendance_date', sa.DateTime(), nullable=True),
        sa.Column('payment_id', sa.Integer(), sa.ForeignKey('payments.id'), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *timestamps(),
        sa.UniqueConstraint('event_id', 'member_id', name='uq_event_attendances_event_member'),
    )
    with op.batch_alter_table('event_attendances', schema=None) as batch_op:
        batch_op.create_index('ix_event_attendances_event_id', ['event_id'], unique=False)
        batch_op.create_index('ix_event_attendances_member_id', ['member_id'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('member_id', sa.Integer(), sa.ForeignKey('members.id'), nullable=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.Enum('event_reminder', 'membership_expiry', 'announcement',
                                  'payment_reminder', 'general',
                                  name='notification_type'), nullable=False),
        sa.Column('status', sa.Enum('unread', 'read', 'sent', name='notification_status'),
                  nullable=False),
        sa.Column('scheduled_at', sa.DateTime(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.Column('is_broadcast', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *timestamps(),
    )
    with op.batch_alter_table('notifications', schema=None) as batch_op:
        batch_op.create_index('ix_notifications_member_id', ['member_id'], unique=False)


def downgrade():
    op.drop_table('notifications')
    op.drop_table('event_attendances')
    op.drop_table('events')
    op.drop_table('payments')
    op.drop_table('members')
    op.drop_table('zones')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in ('notification_status', 'notification_type', 'attendance_status',
                          'event_status', 'event_type', 'payment_status', 'payment_method',
                          'payment_type', 'member_status', 'membership_type'):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
