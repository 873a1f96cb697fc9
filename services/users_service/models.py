from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String, func
from .db import Base


class UserRecord(Base):
    __tablename__ = "users_users"
    __table_args__ = (
        CheckConstraint("user_type IN ('trainer', 'attendee')", name="user_type_check"),
        CheckConstraint("balance >= 0", name="balance_non_negative_check"),
    )

    id = Column(String(36), primary_key=True)
    user_type = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=True)
    balance = Column(Integer, nullable=False, default=0, server_default="0")
    last_ip = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())
