
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_initial'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'accounts',
        sa.Column('account_id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='customer'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('auth_provider', sa.String(length=32), nullable=False, server_default='local'),
        sa.Column('password', sa.String(length=255), nullable=True),
        sa.Column('profile_picture', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_accounts_email', 'accounts', ['email'], unique=True)

    op.create_table(
        'customer',
        sa.Column('customer_id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.account_id', ondelete='CASCADE'), nullable=False),
        sa.Column('first_name', sa.String(length=120), nullable=False),
        sa.Column('middle_name', sa.String(length=120), nullable=True),
        sa.Column('last_name', sa.String(length=120), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('contact_number', sa.String(length=32), nullable=False, server_default=''),
        sa.Column('username', sa.String(length=120), nullable=True),
        sa.Column('birthdate', sa.Date(), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
    )
    op.create_index('ix_customer_account_id', 'customer', ['account_id'], unique=True)

    op.create_table(
        'deact_user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.Integer(), sa.ForeignKey('accounts.account_id', ondelete='CASCADE'), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=True),
        sa.Column('deactivated_until', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reason', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='deactivated'),
    )
    op.create_index('ix_deact_user_account_id', 'deact_user', ['account_id'])

    op.create_table(
        'profiles',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='user'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )

    op.create_table(
        'system_log',
        sa.Column('log_id', sa.Integer(), primary_key=True),
        sa.Column('account_id', sa.String(length=32), nullable=False),
        sa.Column('action', sa.String(length=255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_system_log_account_id', 'system_log', ['account_id'])

    op.create_table(
        'billiard_table',
        sa.Column('table_id', sa.Integer(), primary_key=True),
        sa.Column('table_name', sa.String(length=120), nullable=False),
    )

    op.create_table(
        'reservation',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('reservation_no', sa.String(length=64), nullable=False),
        sa.Column('table_id', sa.Integer(), sa.ForeignKey('billiard_table.table_id'), nullable=True),
        sa.Column('reservation_date', sa.Date(), nullable=True),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('duration', sa.Integer(), nullable=True),
        sa.Column('payment_method', sa.String(length=32), nullable=True),
        sa.Column('payment_type', sa.String(length=32), nullable=True),
        sa.Column('payment_status', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reference_no', sa.String(length=64), nullable=True),
        sa.Column('proof_of_payment', sa.String(length=512), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_reservation_reservation_no', 'reservation', ['reservation_no'])
    op.create_index('ix_reservation_table_id', 'reservation', ['table_id'])
    op.create_index('ix_reservation_status', 'reservation', ['status'])

def downgrade():
    op.drop_index('ix_reservation_status', table_name='reservation')
    op.drop_index('ix_reservation_table_id', table_name='reservation')
    op.drop_index('ix_reservation_reservation_no', table_name='reservation')
    op.drop_table('reservation')
    op.drop_table('billiard_table')
    op.drop_index('ix_system_log_account_id', table_name='system_log')
    op.drop_table('system_log')
    op.drop_table('profiles')
    op.drop_index('ix_deact_user_account_id', table_name='deact_user')
    op.drop_table('deact_user')
    op.drop_index('ix_customer_account_id', table_name='customer')
    op.drop_table('customer')
    op.drop_index('ix_accounts_email', table_name='accounts')
    op.drop_table('accounts')
