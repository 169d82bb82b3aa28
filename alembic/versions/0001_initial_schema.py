"""initial schema: users, goals (milestones, contributions), expenses, incomes, budgets

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

currency = sa.Enum('USD', 'EUR', 'GBP', 'CAD', 'AUD', 'JPY', 'INR', name='currency')
goal_category = sa.Enum('savings', 'debt_payoff', 'investment', 'purchase', 'emergency_fund', 'other', name='goalcategory')
goal_priority = sa.Enum('low', 'medium', 'high', 'urgent', name='goalpriority')
goal_status = sa.Enum('active', 'completed', 'paused', 'cancelled', name='goalstatus')
expense_payment_method = sa.Enum('cash', 'credit_card', 'debit_card', 'bank_transfer', 'digital_wallet', 'check', 'other', name='expensepaymentmethod')
expense_status = sa.Enum('pending', 'completed', 'cancelled', name='expensestatus')
income_source = sa.Enum('salary', 'freelance', 'business', 'investment', 'gift', 'refund', 'other', name='incomesource')
income_payment_method = sa.Enum('bank_transfer', 'cash', 'check', 'digital_wallet', 'other', name='incomepaymentmethod')
income_status = sa.Enum('pending', 'received', 'cancelled', name='incomestatus')
budget_period_type = sa.Enum('monthly', 'quarterly', 'yearly', 'custom', name='budgetperiodtype')
budget_status = sa.Enum('active', 'completed', 'cancelled', 'overdue', name='budgetstatus')


def _owner_column():
    return sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String, nullable=False),
        sa.Column('hashed_password', sa.String, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('is_superuser', sa.Boolean, nullable=False),
        sa.Column('is_verified', sa.Boolean, nullable=False),
        sa.Column('first_name', sa.String(length=50), nullable=True),
        sa.Column('last_name', sa.String(length=50), nullable=True),
        sa.Column('currency', currency, nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=False),
        sa.Column('preferences', sa.JSON, nullable=True),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'goals',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _owner_column(),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('target_amount', sa.Float, nullable=False),
        sa.Column('current_amount', sa.Float, nullable=False),
        sa.Column('category', goal_category, nullable=False),
        sa.Column('priority', goal_priority, nullable=False),
        sa.Column('status', goal_status, nullable=False, index=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('target_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('icon', sa.String(length=10), nullable=True),
        sa.Column('alert_threshold', sa.Integer, nullable=False),
        sa.Column('tags', sa.JSON, nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('version', sa.Integer, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'goal_milestones',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('goal_id', UUID(as_uuid=True), sa.ForeignKey('goals.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('position', sa.Integer, nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('description', sa.String(length=200), nullable=True),
        sa.Column('achieved', sa.Boolean, nullable=False),
        sa.Column('achieved_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'goal_contributions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('goal_id', UUID(as_uuid=True), sa.ForeignKey('goals.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('description', sa.String(length=200), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'expenses',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _owner_column(),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False, index=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('payment_method', expense_payment_method, nullable=False),
        sa.Column('location', sa.String(length=200), nullable=True),
        sa.Column('tags', sa.JSON, nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('status', expense_status, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'incomes',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _owner_column(),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False, index=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False, index=True),
        sa.Column('source', income_source, nullable=False),
        sa.Column('payment_method', income_payment_method, nullable=False),
        sa.Column('tags', sa.JSON, nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('status', income_status, nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'budgets',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        _owner_column(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('category', sa.String(length=50), nullable=False, index=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('period_type', budget_period_type, nullable=False),
        sa.Column('status', budget_status, nullable=False, index=True),
        sa.Column('color', sa.String(length=7), nullable=False),
        sa.Column('icon', sa.String(length=10), nullable=True),
        sa.Column('alert_threshold', sa.Integer, nullable=False),
        sa.Column('tags', sa.JSON, nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        *_timestamps(),
    )


def downgrade():
    for table in ('budgets', 'incomes', 'expenses', 'goal_contributions', 'goal_milestones', 'goals'):
        op.drop_table(table)
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        budget_status, budget_period_type, income_status, income_payment_method, income_source,
        expense_status, expense_payment_method, goal_status, goal_priority, goal_category, currency,
    ):
        enum_type.drop(bind, checkfirst=True)
