from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "trainer_hours",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("hour_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("availability", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "availability IN ('available', 'not_available', 'training_scheduled')",
            name="availability_check",
        ),
    )
    op.create_index("ix_trainer_hours_hour_time", "trainer_hours", ["hour_time"], unique=True)


def downgrade():
    op.drop_index("ix_trainer_hours_hour_time", table_name="trainer_hours")
    op.drop_table("trainer_hours")
