from alembic import op
import sqlalchemy as sa

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "trainings_trainings",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("user_id", sa.String(length=36), nullable=False),
        sa.Column("user_name", sa.String(), nullable=False),
        sa.Column("training_time", sa.DateTime(timezone=True), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("proposed_new_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("move_proposed_by", sa.String(), nullable=True),
        sa.Column("canceled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("LENGTH(notes) <= 1000", name="notes_length_check"),
        sa.CheckConstraint(
            "move_proposed_by IS NULL OR move_proposed_by IN ('trainer', 'attendee')",
            name="move_proposed_by_check",
        ),
    )
    op.create_index("ix_trainings_trainings_user_id", "trainings_trainings", ["user_id"])
    op.create_index("ix_trainings_trainings_training_time", "trainings_trainings", ["training_time"])


def downgrade():
    op.drop_index("ix_trainings_trainings_training_time", table_name="trainings_trainings")
    op.drop_index("ix_trainings_trainings_user_id", table_name="trainings_trainings")
    op.drop_table("trainings_trainings")
