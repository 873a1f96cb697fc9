from sqlalchemy import Column, String, DateTime, CheckConstraint, func
from .db import Base


class TrainerHour(Base):
    __tablename__ = "trainer_hours"
    __table_args__ = (
        CheckConstraint(
            "availability IN ('available', 'not_available', 'training_scheduled')",
            name="availability_check",
        ),
    )

    id = Column(String(36), primary_key=True)
    hour_time = Column(DateTime(timezone=True), unique=True, nullable=False, index=True)
    availability = Column(String, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
