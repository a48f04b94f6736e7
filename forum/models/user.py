from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from forum.constants.roles import DEFAULT_ROLE
from forum.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(30), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    # Canonical Role value; see forum.constants.roles
    role = Column(String(20), nullable=False, default=DEFAULT_ROLE.value, index=True)
    banned = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    posts = relationship("Post", back_populates="author", passive_deletes=True)
