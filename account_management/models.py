"""
Account Management Database Models
Back-office administrator accounts
"""
from sqlalchemy import TIMESTAMP, Column, String
from sqlalchemy.sql import func

from database.base import Base, generate_uuid


class AdminUser(Base):
    """Administrator able to sign in to the back office"""

    __tablename__ = "admin_users"

    id = Column(String, primary_key=True, default=generate_uuid)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    created_at = Column(TIMESTAMP, server_default=func.now(), nullable=False)
    last_login_at = Column(TIMESTAMP)

    def __repr__(self):
        return f"<AdminUser(id={self.id}, username={self.username})>"
