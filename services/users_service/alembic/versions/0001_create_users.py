from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users_users",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_type", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_ip", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("user_type IN ('trainer', 'attendee')", name="user_type_check"),
        sa.CheckConstraint("balance >= 0", name="balance_non_negative_check"),
    )
    op.create_index("ix_users_users_email", "users_users", ["email"], unique=True)
    op.create_index("ix_users_users_user_type", "users_users", ["user_type"])


def downgrade():
    op.drop_index("ix_users_users_user_type", table_name="users_users")
    op.drop_index("ix_users_users_email", table_name="users_users")
    op.drop_table("users_users")
