from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String, Text, func, text
from .db import Base


class TrainingRecord(Base):
    __tablename__ = "trainings_trainings"
    __table_args__ = (
        CheckConstraint("LENGTH(notes) <= 1000", name="notes_length_check"),
        CheckConstraint(
            "move_proposed_by IS NULL OR move_proposed_by IN ('trainer', 'attendee')",
            name="move_proposed_by_check",
        ),
    )

    id = Column(String(36), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    user_name = Column(String, nullable=False)
    training_time = Column(DateTime(timezone=True), nullable=False, index=True)
    notes = Column(Text, nullable=True)
    proposed_new_time = Column(DateTime(timezone=True), nullable=True)
    move_proposed_by = Column(String, nullable=True)
    canceled = Column(Boolean, nullable=False, default=False, server_default=text("false"))

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
